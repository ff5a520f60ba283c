"""
Background email dispatcher - fire-and-forget NotificationSender.

Wraps another NotificationSender and runs every send on a worker thread,
so the HTTP response only waits for the database write. A failed send
is logged once and dropped: no retry, no effect on the user record.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial

from src.domain.exceptions import DeliveryError
from src.domain.ports import NotificationSender
from src.domain.user import User

logger = logging.getLogger(__name__)


class BackgroundEmailDispatcher:
    """
    Implements NotificationSender protocol by delegating on a thread pool.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, delegate: NotificationSender, max_workers: int = 2) -> None:
        self._delegate = delegate
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="email")

    def send_verification_email(self, user: User, encoded_token: str) -> None:
        self._submit("Verification", self._delegate.send_verification_email, user, encoded_token)

    def send_confirmation_email(self, user: User) -> None:
        self._submit("Confirmation", self._delegate.send_confirmation_email, user)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting sends; with wait=True, finish the queued ones."""
        self._executor.shutdown(wait=wait)

    def _submit(self, kind: str, send: Callable[..., None], user: User, *args: str) -> Future:
        """
        Queue a send and return its future.

        Raises:
            DeliveryError: dispatcher has been shut down
        """
        try:
            future = self._executor.submit(send, user, *args)
        except RuntimeError as e:
            raise DeliveryError(f"{kind} email to {user.email} not queued") from e
        future.add_done_callback(partial(self._log_failure, kind, user.email))
        return future

    @staticmethod
    def _log_failure(kind: str, recipient: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("%s email to %s failed: %s", kind, recipient, error)
