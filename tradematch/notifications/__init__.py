"""Application notifications for candidates and employers.

This module provides:
- StatusNotifier: background delivery with retry/backoff through an injected dispatcher
- StatusNotification / ApplicationNotice / NotificationResult: message and outcome types
- TemplateRenderer: Jinja2 rendering of the plain-text message bodies
- build_status_notification: per-status subject, headline and body for candidates
- build_application_notice: the employer's "new application" summary
"""

from .models import (
    ApplicationNotice,
    NotificationDeliveryError,
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    StatusNotification,
)
from .payloads import (
    APPLICATION_NOTICE_TEMPLATE,
    STATUS_COPY,
    build_application_notice,
    build_status_notification,
)
from .service import StatusNotifier
from .templates import TemplateRenderer

__all__ = [
    "StatusNotifier",
    "StatusNotification",
    "ApplicationNotice",
    "NotificationResult",
    "NotificationError",
    "NotificationDeliveryError",
    "NotificationTemplateError",
    "TemplateRenderer",
    "build_status_notification",
    "build_application_notice",
    "STATUS_COPY",
    "APPLICATION_NOTICE_TEMPLATE",
]
