"""Soft checks on raw configuration that warn instead of failing."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration mapping for settings that are legal but risky.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    notifications = config_dict.get("notifications") or {}
    if isinstance(notifications, dict):
        if notifications.get("enabled") is False:
            warning_messages.append(
                "Status notifications are disabled; candidates will not hear about status changes"
            )
        if notifications.get("max_retries") == 0:
            warning_messages.append(
                "notifications.max_retries is 0; a single failed dispatch drops the notification"
            )

    scoring = config_dict.get("scoring") or {}
    if isinstance(scoring, dict):
        max_workers = scoring.get("max_workers", 1)
        if isinstance(max_workers, int) and max_workers > 16:
            warning_messages.append(
                f"Large scoring.max_workers ({max_workers}) rarely helps; scoring is CPU-bound"
            )

    lifecycle = config_dict.get("lifecycle") or {}
    if isinstance(lifecycle, dict) and lifecycle.get("cas_max_attempts") == 1:
        warning_messages.append(
            "lifecycle.cas_max_attempts is 1; any concurrent interaction update will fail"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
