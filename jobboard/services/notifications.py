"""
Fire-and-forget notifications.

``notify`` hands the message to a worker thread and returns immediately.
Delivery problems are logged from the future's done-callback and never
reach the request that triggered them.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, Optional

from jobboard.config import settings
from jobboard.utils.email import render_email, send_email_sync

logger = logging.getLogger("jobboard.notifications")


class Notifier(ABC):

    @abstractmethod
    def notify(self, kind: str, recipient_email: str, template_data: dict) -> None:
        """Queue a notification. Must not raise and must not block."""


class EmailNotifier(Notifier):

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None, sender: Callable = send_email_sync):
        self.executor = executor or ThreadPoolExecutor(
            max_workers=settings.mail_workers, thread_name_prefix="notify"
        )
        self.sender = sender

    def notify(self, kind: str, recipient_email: str, template_data: dict) -> None:
        try:
            subject, text = render_email(kind, template_data)
            future = self.executor.submit(self.sender, recipient_email, subject, text)
        except Exception:
            logger.exception("Could not queue %s email to %s", kind, recipient_email)
            return
        future.add_done_callback(partial(self._log_outcome, kind, recipient_email))

    @staticmethod
    def _log_outcome(kind: str, recipient_email: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Error sending %s email to %s: %s", kind, recipient_email, error)
        else:
            logger.debug("%s email dispatched to %s", kind, recipient_email)

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False)
