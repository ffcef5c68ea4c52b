"""Notification dispatch seam.

Delivery (web push, email) lives outside this service. Everything here is
at-most-effort: a failing notifier is logged and never fails the caller.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    title: str
    body: str
    tag: str = ""
    data: dict[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    def notify(self, user_id: str, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Default notifier; records what would have been pushed."""

    def notify(self, user_id: str, notification: Notification) -> None:
        logger.info("Notify user %s: %s (%s)", user_id, notification.title, notification.tag)


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    """FastAPI dependency; tests override it to capture notifications."""
    return _notifier


def dispatch(notifier: Notifier, user_ids: Union[str, Iterable[str]], notification: Notification) -> None:
    """Send ``notification`` to each user, swallowing and logging failures."""
    if isinstance(user_ids, str):
        user_ids = [user_ids]
    for user_id in user_ids:
        try:
            notifier.notify(user_id, notification)
        except Exception:
            logger.warning("Failed to send '%s' notification to user %s", notification.tag, user_id, exc_info=True)
