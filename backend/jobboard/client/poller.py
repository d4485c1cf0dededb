"""
Status polling for submitted resumes

After an upload or reprocess the client waits one interval, fetches the
status, and repeats until the record is completed or failed or the attempt
budget runs out. Running out of attempts is not a failure: the server keeps
working and a later fetch can pick up the result.
"""
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import structlog

from jobboard.client.api_client import ResumeApiClient, ResumeClientError
from jobboard.client.config import PollerSettings

logger = structlog.get_logger()

TERMINAL_STATUSES = ("completed", "failed")

StatusFetcher = Callable[[int], Dict[str, Any]]


@dataclass
class PollResult:
    status: str
    error: Optional[str] = None
    attempts: int = 0
    exhausted: bool = False
    cancelled: bool = False
    transport_error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class PollerBusyError(RuntimeError):
    """poll() called while a previous poll on the same poller is running"""


class StatusPoller:
    """Single-flight status poller with an attempt budget"""

    def __init__(
        self,
        fetch_status: StatusFetcher,
        interval_seconds: float = 2.0,
        max_attempts: int = 30,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.fetch_status = fetch_status
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self._cancelled = threading.Event()
        self._in_flight = threading.Lock()

    @classmethod
    def for_client(cls, client: ResumeApiClient, settings: Optional[PollerSettings] = None) -> "StatusPoller":
        settings = settings or PollerSettings()
        return cls(
            client.get_status,
            interval_seconds=settings.POLL_INTERVAL_SECONDS,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.cancel()

    def cancel(self):
        """
        Stop the running poll at its next wait; safe from any thread

        When no poll is running the next poll returns cancelled without
        fetching, unless reset() is called first.
        """
        self._cancelled.set()

    def reset(self):
        """Drop a pending cancel"""
        self._cancelled.clear()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def poll(
        self,
        resume_id: int,
        initial_status: str = "processing",
        on_update: Optional[Callable[[PollResult], None]] = None,
    ) -> PollResult:
        """
        Poll until terminal, cancelled, or out of attempts

        Every call starts from attempt zero, so reprocessing reuses the same
        poller. A cancel issued before the call stops it before the first
        fetch. A transport or API error ends polling with the last known
        status and the error message attached.
        """
        if not self._in_flight.acquire(blocking=False):
            raise PollerBusyError(f"A poll is already running on this poller (resume {resume_id})")

        result = PollResult(status=initial_status)
        try:
            while result.attempts < self.max_attempts:
                if self._cancelled.wait(self.interval_seconds):
                    result.cancelled = True
                    logger.info("resume_poll_cancelled", resume_id=resume_id, attempts=result.attempts)
                    return result

                result.attempts += 1
                try:
                    body = self.fetch_status(resume_id)
                except ResumeClientError as e:
                    result.transport_error = e.message
                    logger.warning(
                        "resume_poll_request_failed",
                        resume_id=resume_id,
                        attempt=result.attempts,
                        error=e.message,
                    )
                    return result

                result.status = body.get("processing_status", result.status)
                result.error = body.get("processing_error")
                if on_update:
                    on_update(result)

                if result.is_terminal:
                    logger.info(
                        "resume_poll_finished",
                        resume_id=resume_id,
                        status=result.status,
                        attempts=result.attempts,
                    )
                    return result

            result.exhausted = True
            logger.info(
                "resume_poll_exhausted",
                resume_id=resume_id,
                status=result.status,
                attempts=result.attempts,
            )
            return result
        finally:
            # Cancels issued before or during this poll end with it
            self._cancelled.clear()
            self._in_flight.release()
