"""Copy and payload construction for candidate and employer notifications."""

import math
from typing import Dict, Optional

from tradematch.domain.models import (
    Application,
    ApplicationStatus,
    CandidateProfile,
    JobRequirement,
)
from tradematch.matching.models import score_band

from .models import ApplicationNotice, StatusNotification
from .templates import TemplateRenderer

STATUS_COPY: Dict[ApplicationStatus, Dict[str, str]] = {
    ApplicationStatus.REVIEWING: {
        "subject": "Application Under Review",
        "headline": "Your Application Is Being Reviewed!",
        "message": (
            "Great news! The employer is actively reviewing your application. "
            "They'll be in touch soon with next steps."
        ),
    },
    ApplicationStatus.INTERVIEW: {
        "subject": "Interview Scheduled!",
        "headline": "Congratulations! You've Been Selected for an Interview!",
        "message": (
            "The employer was impressed with your application and would like to schedule "
            "an interview. They will reach out to you shortly with details."
        ),
    },
    ApplicationStatus.OFFER: {
        "subject": "Job Offer Received!",
        "headline": "Congratulations! You've Received a Job Offer!",
        "message": (
            "Amazing news! The employer has extended a job offer to you. "
            "They will be in contact with the details of the offer."
        ),
    },
    ApplicationStatus.HIRED: {
        "subject": "Welcome to the Team!",
        "headline": "Congratulations! You're Hired!",
        "message": (
            "You've been officially hired! The employer will be in touch with "
            "onboarding details and next steps."
        ),
    },
    ApplicationStatus.REJECTED: {
        "subject": "Application Update",
        "headline": "Application Status Update",
        "message": (
            "Thank you for your interest. Unfortunately, the employer has decided to "
            "move forward with other candidates at this time."
        ),
    },
}


def build_status_notification(
    application_id: str,
    new_status: ApplicationStatus,
    rejection_reason: Optional[str] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> StatusNotification:
    """Build the notification announcing a status change.

    The rejection reason is only carried for rejections.

    Args:
        application_id: Application that changed
        new_status: Status it moved to (anything but new)
        rejection_reason: Employer feedback for rejections
        renderer: Template renderer for the body (creates default if None)

    Returns:
        StatusNotification with subject, headline and rendered body

    Raises:
        KeyError: If new_status has no notification copy (i.e. new)
        NotificationTemplateError: If the body cannot be rendered
    """
    status = ApplicationStatus(new_status)
    copy = STATUS_COPY[status]
    reason = rejection_reason if status == ApplicationStatus.REJECTED else None

    renderer = renderer or TemplateRenderer()
    text_body = renderer.render(
        {
            "headline": copy["headline"],
            "message": copy["message"],
            "new_status": status.value,
            "rejection_reason": reason,
        }
    )

    return StatusNotification(
        application_id=application_id,
        new_status=status.value,
        rejection_reason=reason,
        subject=copy["subject"],
        headline=copy["headline"],
        message=copy["message"],
        text_body=text_body,
    )


APPLICATION_NOTICE_TEMPLATE = "application_notice.txt.j2"


def build_application_notice(
    application: Application,
    candidate: Optional[CandidateProfile] = None,
    job: Optional[JobRequirement] = None,
    renderer: Optional[TemplateRenderer] = None,
) -> ApplicationNotice:
    """Build the employer's notice for a newly submitted application.

    Candidate and job details are optional; the notice falls back to
    generic wording when they are missing.

    Raises:
        NotificationTemplateError: If the body cannot be rendered
    """
    candidate_name = candidate.name if candidate is not None and candidate.name else None
    job_title = job.title if job is not None and job.title else None
    years = _years(candidate.years_experience) if candidate is not None else 0
    cert_count = len(candidate.certifications) if candidate is not None else 0
    processes = tuple(sorted(candidate.processes)) if candidate is not None else ()

    who = candidate_name or "A candidate"
    what = job_title or f"job {application.job_id}"
    score = application.match_score

    renderer = renderer or TemplateRenderer()
    text_body = renderer.render(
        {
            "candidate_name": who,
            "job_title": what,
            "match_line": (
                f"{score}% ({score_band(score).label})" if score is not None else "not scored"
            ),
            "years_experience": f"{years:g}",
            "cert_count": cert_count,
            "processes_line": ", ".join(processes) if processes else "none listed",
            "cover_message": application.cover_message,
        },
        template_name=APPLICATION_NOTICE_TEMPLATE,
    )

    return ApplicationNotice(
        application_id=application.id,
        job_id=application.job_id,
        job_title=job_title,
        candidate_name=candidate_name,
        match_score=score,
        years_experience=years,
        cert_count=cert_count,
        processes=processes,
        cover_message=application.cover_message,
        subject=f"New Application: {who} applied for {what}",
        text_body=text_body,
    )


def _years(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value) or value < 0:
        return 0
    return value
