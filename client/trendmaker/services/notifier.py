"""
Notifier abstraction for interruptive user alerts.

The job controller reports every error to a Notifier; the host UI decides
how to show it (dialog, toast, stderr line).
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import TextIO

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """
    Abstract base class for user-facing alerts.

    Implementations:
    - LoggingNotifier: Writes alerts to the log (default)
    - ConsoleNotifier: Prints alerts to a text stream (command line host)
    """

    @abstractmethod
    def notify(self, title: str, message: str) -> None:
        """
        Show an alert to the user.

        Args:
            title: Short alert title, e.g. "Render Error"
            message: Human-readable details
        """
        pass


class LoggingNotifier(Notifier):
    """Notifier that records alerts as log warnings."""

    def notify(self, title: str, message: str) -> None:
        logger.warning(f"[ALERT] {title}: {message}")


class ConsoleNotifier(Notifier):
    """Notifier that prints alerts to a stream (stderr by default)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def notify(self, title: str, message: str) -> None:
        stream = self._stream or sys.stderr
        print(f"! {title}: {message}", file=stream)
