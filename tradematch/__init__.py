"""TradeMatch engine: match scoring, feed ranking and candidate/job lifecycles."""

__version__ = "0.1.0"
