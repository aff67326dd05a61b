"""Data models and exceptions for candidate and employer notifications."""

from dataclasses import dataclass
from typing import Optional, Tuple


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when the message body cannot be rendered."""

    pass


class NotificationDeliveryError(NotificationError):
    """Raised by dispatchers when a notification could not be delivered."""

    pass


@dataclass(frozen=True)
class StatusNotification:
    """Message telling a candidate their application changed status.

    Attributes:
        application_id: Application that changed
        new_status: Status it moved to
        rejection_reason: Employer feedback, only set for rejections
        subject: Email subject / push title
        headline: First line of the message
        message: Status-specific explanation
        text_body: Full plain-text body
    """

    application_id: str
    new_status: str
    rejection_reason: Optional[str] = None
    subject: str = ""
    headline: str = ""
    message: str = ""
    text_body: str = ""


@dataclass(frozen=True)
class ApplicationNotice:
    """Message telling an employer a candidate applied to their posting.

    Attributes:
        application_id: New application
        job_id: Posting applied to
        job_title: Posting title, when known
        candidate_name: Applicant display name, when known
        match_score: Score snapshot taken at submission
        years_experience: Applicant's years in the trade
        cert_count: Certifications on the applicant's profile
        processes: Applicant's process skills, sorted
        cover_message: Applicant's message to the employer
        subject: Email subject / push title
        text_body: Full plain-text body
    """

    application_id: str
    job_id: str
    job_title: Optional[str] = None
    candidate_name: Optional[str] = None
    match_score: Optional[int] = None
    years_experience: float = 0
    cert_count: int = 0
    processes: Tuple[str, ...] = ()
    cover_message: Optional[str] = None
    subject: str = ""
    text_body: str = ""


@dataclass
class NotificationResult:
    """Outcome of delivering one notification.

    Attributes:
        application_id: Application the notification was about
        new_status: Status announced
        attempts: Dispatch attempts made
        status: Outcome status (sent, skipped, failed)
        error: Optional error message if delivery failed
        kind: "status" for candidate notices, "application" for employer notices
    """

    application_id: str
    new_status: str
    attempts: int
    status: str  # "sent", "skipped", "failed"
    error: Optional[str] = None
    kind: str = "status"

    def is_success(self) -> bool:
        return self.status == "sent"
