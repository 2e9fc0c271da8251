"""User notification sinks."""

import logging
from dataclasses import dataclass

from editor_session.services.sessions import Notifier

_logger = logging.getLogger(__name__)


@dataclass
class LoggingNotifier(Notifier):
    """Notifier that writes notifications to the log."""

    def notify(self, title: str, description: str, *, variant: str = "default") -> None:
        level = logging.WARNING if variant == "destructive" else logging.INFO
        _logger.log(level, "%s: %s", title, description)
