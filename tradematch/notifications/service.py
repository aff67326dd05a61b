"""Fire-and-forget delivery of application notifications.

``StatusNotifier.notify`` (candidate, on a status change) and
``StatusNotifier.notify_employer`` (employer, on a new application) hand
delivery to an executor and return at once. The worker builds the message,
calls the injected dispatcher, and retries with exponential backoff. A
failed delivery is logged and reported in the returned future's result; it
never reaches the caller that created or moved the application.
"""

import contextvars
import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, Optional

from tradematch.config.models import NotificationConfig
from tradematch.domain.models import (
    Application,
    ApplicationStatus,
    CandidateProfile,
    JobRequirement,
)
from tradematch.logging import get_logger
from tradematch.logging.context import log_context

from .models import NotificationResult, NotificationTemplateError
from .payloads import build_application_notice, build_status_notification
from .templates import TemplateRenderer

if TYPE_CHECKING:
    from tradematch.lifecycle.protocols import NotificationDispatcher

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY = 30.0

KIND_STATUS = "status"
KIND_APPLICATION = "application"


def _completed(result: NotificationResult) -> "Future[NotificationResult]":
    future: Future = Future()
    future.set_result(result)
    return future


class StatusNotifier:
    """Delivers notifications in the background with bounded retries."""

    def __init__(
        self,
        dispatcher: "NotificationDispatcher",
        config: Optional[NotificationConfig] = None,
        executor: Optional[Executor] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize StatusNotifier.

        Args:
            dispatcher: Transport that delivers a built notification
            config: Retry and worker settings (defaults if None)
            executor: Executor to run deliveries on (creates a thread pool if None)
            template_renderer: Body renderer (creates default if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.dispatcher = dispatcher
        self.config = config or NotificationConfig()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.logger = logger_instance or logger

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="status-notifier"
        )

    def notify(
        self,
        application_id: str,
        new_status: ApplicationStatus,
        rejection_reason: Optional[str] = None,
    ) -> "Future[NotificationResult]":
        """Queue a status notification for the candidate.

        Args:
            application_id: Application that changed
            new_status: Status it moved to
            rejection_reason: Employer feedback, forwarded for rejections only

        Returns:
            Future resolving to the NotificationResult. It never resolves to
            an exception.
        """
        status_value = ApplicationStatus(new_status).value
        return self._queue(
            application_id,
            status_value,
            KIND_STATUS,
            self._deliver,
            application_id,
            status_value,
            rejection_reason,
        )

    def notify_employer(
        self,
        application: Application,
        candidate: Optional[CandidateProfile] = None,
        job: Optional[JobRequirement] = None,
    ) -> "Future[NotificationResult]":
        """Queue the employer's notice for a newly submitted application.

        Args:
            application: The stored application
            candidate: Applicant profile, for the notice's summary
            job: Posting applied to, for the notice's title

        Returns:
            Future resolving to the NotificationResult. It never resolves to
            an exception.
        """
        return self._queue(
            application.id,
            application.status.value,
            KIND_APPLICATION,
            self._deliver_employer_notice,
            application,
            candidate,
            job,
        )

    def _queue(
        self,
        application_id: str,
        status_value: str,
        kind: str,
        work: Callable[..., NotificationResult],
        *args: Any,
    ) -> "Future[NotificationResult]":
        if not self.config.enabled:
            self.logger.info(
                f"Notifications disabled; skipping {kind} notice for "
                f"application {application_id}",
                extra={"event": "notification.skip", "reason": "disabled", "kind": kind},
            )
            return _completed(
                NotificationResult(
                    application_id=application_id,
                    new_status=status_value,
                    attempts=0,
                    status="skipped",
                    kind=kind,
                )
            )

        # Carry log context (application_id etc.) into the worker thread
        ctx = contextvars.copy_context()
        try:
            return self.executor.submit(ctx.run, work, *args)
        except Exception as e:
            error_msg = f"Could not queue notification: {e}"
            self.logger.error(
                f"Could not queue {kind} notice ({status_value}) for application "
                f"{application_id}: {e}",
                exc_info=True,
                extra={
                    "event": "notification.send.failure",
                    "application_id": application_id,
                    "new_status": status_value,
                    "kind": kind,
                    "attempts": 0,
                    "error_type": type(e).__name__,
                    "retry_remaining": False,
                },
            )
            return _completed(
                NotificationResult(
                    application_id=application_id,
                    new_status=status_value,
                    attempts=0,
                    status="failed",
                    error=error_msg,
                    kind=kind,
                )
            )

    def _deliver(
        self, application_id: str, new_status: str, rejection_reason: Optional[str]
    ) -> NotificationResult:
        """Build and dispatch one status notification."""
        with log_context(application_id=application_id, new_status=new_status):
            try:
                notification = build_status_notification(
                    application_id,
                    ApplicationStatus(new_status),
                    rejection_reason,
                    renderer=self.template_renderer,
                )
            except (KeyError, NotificationTemplateError) as e:
                # Missing copy or a broken template; not retried
                return self._build_failed(application_id, new_status, KIND_STATUS, e)

            return self._send_with_retry(
                self.dispatcher.dispatch, notification, application_id, new_status, KIND_STATUS
            )

    def _deliver_employer_notice(
        self,
        application: Application,
        candidate: Optional[CandidateProfile],
        job: Optional[JobRequirement],
    ) -> NotificationResult:
        """Build and dispatch one employer notice."""
        status_value = application.status.value

        with log_context(application_id=application.id, job_id=application.job_id):
            send = getattr(self.dispatcher, "dispatch_application", None)
            if send is None:
                self.logger.info(
                    f"Dispatcher has no employer channel; skipping notice for "
                    f"application {application.id}",
                    extra={
                        "event": "notification.skip",
                        "reason": "unsupported",
                        "kind": KIND_APPLICATION,
                    },
                )
                return NotificationResult(
                    application_id=application.id,
                    new_status=status_value,
                    attempts=0,
                    status="skipped",
                    kind=KIND_APPLICATION,
                )

            try:
                notice = build_application_notice(
                    application, candidate, job, renderer=self.template_renderer
                )
            except NotificationTemplateError as e:
                return self._build_failed(application.id, status_value, KIND_APPLICATION, e)

            return self._send_with_retry(
                send, notice, application.id, status_value, KIND_APPLICATION
            )

    def _build_failed(
        self, application_id: str, new_status: str, kind: str, error: Exception
    ) -> NotificationResult:
        error_msg = f"Failed to build notification: {error}"
        self.logger.error(
            error_msg,
            exc_info=True,
            extra={
                "event": "notification.send.failure",
                "kind": kind,
                "attempts": 0,
                "error_type": type(error).__name__,
                "retry_remaining": False,
            },
        )
        return NotificationResult(
            application_id=application_id,
            new_status=new_status,
            attempts=0,
            status="failed",
            error=error_msg,
            kind=kind,
        )

    def _send_with_retry(
        self,
        send: Callable[[Any], None],
        message: Any,
        application_id: str,
        new_status: str,
        kind: str,
    ) -> NotificationResult:
        """Call ``send`` until it returns without raising or attempts run out."""
        max_attempts = self.config.max_retries + 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.config.retry_initial_delay * (
                    self.config.retry_backoff_multiplier ** (attempt - 2)
                )
                delay = min(delay, MAX_RETRY_DELAY)
                self.logger.warning(
                    f"Retrying {kind} notice ({new_status}) for application {application_id} "
                    f"(attempt {attempt}/{max_attempts}) after {delay:.1f}s delay",
                    extra={"event": "notification.send.attempt", "attempt": attempt, "kind": kind},
                )
                time.sleep(delay)

            try:
                send(message)
            except Exception as e:
                # Any exception from the dispatcher counts as a failed attempt
                last_error = str(e)
                error_type = type(e).__name__

                if attempt < max_attempts:
                    self.logger.warning(
                        f"Dispatch of {kind} notice failed for application {application_id} "
                        f"(attempt {attempt}/{max_attempts}): {e}",
                        extra={
                            "event": "notification.send.failure",
                            "kind": kind,
                            "attempt": attempt,
                            "error_type": error_type,
                            "retry_remaining": True,
                        },
                    )
                else:
                    self.logger.error(
                        f"Dispatch of {kind} notice failed for application {application_id} "
                        f"after {max_attempts} attempts: {e}",
                        exc_info=True,
                        extra={
                            "event": "notification.send.failure",
                            "kind": kind,
                            "attempts": max_attempts,
                            "attempt": attempt,
                            "error_type": error_type,
                            "retry_remaining": False,
                        },
                    )
                continue

            self.logger.info(
                f"Sent {kind} notice ({new_status}) for application {application_id} "
                f"(attempts: {attempt})",
                extra={"event": "notification.send.success", "attempt": attempt, "kind": kind},
            )
            return NotificationResult(
                application_id=application_id,
                new_status=new_status,
                attempts=attempt,
                status="sent",
                kind=kind,
            )

        return NotificationResult(
            application_id=application_id,
            new_status=new_status,
            attempts=max_attempts,
            status="failed",
            error=last_error,
            kind=kind,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop the executor this notifier created. Injected executors are left alone."""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
