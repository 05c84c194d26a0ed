"""Caller-visible error and warning lists.

Readers keep going after data-quality problems (unknown mod tags, missing
side files, unrecognized enzyme codes). Each problem is logged and also
appended to a MessageLog so a batch caller can inspect it afterwards.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


class MessageLog:
    """Accumulates error and warning messages, mirroring each into logging.

    Parameters
    ----------
    logger_name : str, optional
        Logger that receives the messages (default: this module's logger)

    Examples
    --------
    >>> log = MessageLog()
    >>> log.warning("ModSummary file not found")
    >>> log.warning_messages
    ['ModSummary file not found']
    """

    def __init__(self, logger_name: str = None):
        self.error_messages: List[str] = []
        self.warning_messages: List[str] = []
        self._logger = logging.getLogger(logger_name) if logger_name else logger

    def error(self, message: str):
        self.error_messages.append(message)
        self._logger.error(message)

    def warning(self, message: str):
        self.warning_messages.append(message)
        self._logger.warning(message)

    def status(self, message: str):
        """Informational message; logged only."""
        self._logger.info(message)

    def debug(self, message: str):
        self._logger.debug(message)

    @property
    def error_message(self) -> str:
        """Most recent error, or an empty string."""
        return self.error_messages[-1] if self.error_messages else ""

    @property
    def has_errors(self) -> bool:
        return bool(self.error_messages)

    def clear_errors(self):
        self.error_messages.clear()

    def clear_warnings(self):
        self.warning_messages.clear()

    def clear(self):
        self.clear_errors()
        self.clear_warnings()
