"""Turn a posting's pay into one comparable number for sorting.

Numbers are annualized so hourly and salaried postings sort on the same
scale. Anything that cannot be read (DOE, blank, free text without
amounts) yields None; nothing in here raises.
"""

import math
import re
from typing import List, Optional, Tuple

from tradematch.domain.models import PayPeriod, PayRange

HOURS_PER_YEAR = 2080

# Amounts below this with no period hint are read as hourly rates
HOURLY_CEILING = 500

_AMOUNT = re.compile(r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*([kK])?")
_HOURLY_HINT = re.compile(r"/\s*h(?:ou)?r\b|per\s+hour|hourly|an\s+hour", re.IGNORECASE)
_YEARLY_HINT = re.compile(
    r"/\s*y(?:ea)?r\b|per\s+year|annual|salary|a\s+year", re.IGNORECASE
)
_DOE_HINT = re.compile(r"\bdoe\b|depends\s+on\s+experience", re.IGNORECASE)


def pay_midpoint(pay: Optional[PayRange]) -> Optional[float]:
    """Annualized midpoint of a pay range, or None when it cannot be read.

    Numeric bounds win over display text. A missing period on numeric bounds
    is read as hourly, the way postings display it by default.

    Example:
        >>> pay_midpoint(PayRange(minimum=25, maximum=35, period="hourly"))
        62400.0
        >>> pay_midpoint(PayRange(display="$60,000+/year"))
        60000.0
    """
    if pay is None or pay.period == PayPeriod.DOE:
        return None

    amounts = [
        value
        for value in (pay.minimum, pay.maximum)
        if value is not None and math.isfinite(value) and value > 0
    ]
    if amounts:
        hourly = pay.period != PayPeriod.SALARY
    elif pay.display:
        amounts, hourly = _read_display(pay.display, pay.period)
    else:
        return None

    if not amounts:
        return None

    midpoint = sum(amounts) / len(amounts)
    return midpoint * HOURS_PER_YEAR if hourly else midpoint


def _read_display(text: str, period: Optional[PayPeriod]) -> Tuple[List[float], bool]:
    if _DOE_HINT.search(text):
        return [], False

    amounts = []
    for number, thousands in _AMOUNT.findall(text):
        try:
            value = float(number.replace(",", ""))
        except ValueError:
            continue
        if thousands:
            value *= 1000
        if value > 0:
            amounts.append(value)
        if len(amounts) == 2:
            break

    if period == PayPeriod.HOURLY or _HOURLY_HINT.search(text):
        hourly = True
    elif period == PayPeriod.SALARY or _YEARLY_HINT.search(text):
        hourly = False
    else:
        hourly = bool(amounts) and max(amounts) < HOURLY_CEILING

    return amounts, hourly
