"""Email dispatcher: the process-wide outbound email resource.

Each submitted email is an isolated job with its own error boundary. A job
makes exactly one delivery attempt; failures are logged and dropped. In
background mode jobs run on a thread pool that is started lazily on the
first submission and stopped by shutdown().
"""

import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from insyd.config.environment import EnvironmentConfig
from insyd.config.models import DeliveryMode, EmailConfig
from insyd.logging import get_logger

from .models import OutboundEmail, SMTPDeliveryError
from .smtp_client import SMTPClient, build_message, build_sender_address

logger = get_logger(__name__, component="email")


class EmailDispatcher:
    """Submits outbound emails for best-effort, at-most-once delivery."""

    def __init__(
        self,
        env_config: EnvironmentConfig,
        email_config: EmailConfig,
        smtp_client: Optional[SMTPClient] = None,
    ):
        self.env_config = env_config
        self.email_config = email_config
        self.smtp_client = smtp_client or SMTPClient()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def enabled(self) -> bool:
        """Email is on in config and an SMTP host is configured."""
        return bool(self.email_config.enabled) and self.env_config.smtp_configured

    @property
    def delivery_mode(self) -> str:
        return DeliveryMode(self.email_config.delivery_mode).value

    @property
    def started(self) -> bool:
        return self._executor is not None

    def submit(self, email: OutboundEmail) -> bool:
        """Hand an email over for delivery.

        Args:
            email: Rendered email

        Returns:
            True if a delivery attempt was made or scheduled, False if skipped
        """
        if not self.enabled:
            logger.debug(
                f"Email delivery disabled, skipping message to {email.recipient}",
                extra={"event": "email.send.skipped", "reason": "disabled"},
            )
            return False

        if self.delivery_mode == DeliveryMode.INLINE.value:
            if self._closed:
                return self._refuse(email)
            self._deliver(email)
            return True

        ctx = contextvars.copy_context()
        # shutdown() closes under _lock; jobs are only scheduled on an open pool
        with self._lock:
            if self._closed:
                return self._refuse(email)
            self._start_executor().submit(ctx.run, self._deliver, email)
        return True

    def _refuse(self, email: OutboundEmail) -> bool:
        logger.warning(
            f"Dispatcher is shut down, dropping message to {email.recipient}",
            extra={"event": "email.send.skipped", "reason": "shutdown"},
        )
        return False

    def _start_executor(self) -> ThreadPoolExecutor:
        """Return the worker pool, creating it on first use. Caller holds _lock."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.email_config.max_workers,
                thread_name_prefix="insyd-email",
            )
            logger.info(
                f"Email dispatcher started with {self.email_config.max_workers} workers",
                extra={
                    "event": "email.dispatcher.started",
                    "max_workers": self.email_config.max_workers,
                },
            )
        return self._executor

    def _deliver(self, email: OutboundEmail) -> bool:
        try:
            message = build_message(email, build_sender_address(self.env_config))
            self.smtp_client.send(message, self.env_config, use_tls=self.email_config.use_tls)
        except SMTPDeliveryError as e:
            logger.error(
                f"Email delivery to {email.recipient} failed: {e}",
                extra={"event": "email.send.failure", "recipient": email.recipient},
            )
            return False
        except Exception as e:
            logger.error(
                f"Unexpected error delivering email to {email.recipient}: {e}",
                exc_info=True,
                extra={"event": "email.send.failure", "recipient": email.recipient},
            )
            return False

        logger.info(
            f"Email sent to {email.recipient}",
            extra={"event": "email.send.success", "recipient": email.recipient},
        )
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting emails and stop the worker pool.

        Args:
            wait: If True, block until queued emails have been attempted
        """
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None

        if executor is not None:
            executor.shutdown(wait=wait)
            logger.info(
                "Email dispatcher stopped",
                extra={"event": "email.dispatcher.stopped", "waited": wait},
            )
