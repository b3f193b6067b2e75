"""Busy-flag guard for user-triggered actions."""

import logging
import threading
from typing import Any, Callable

from redtools.core.exceptions import BusyError, RedToolsError
from redtools.core.types import ActionResult

logger = logging.getLogger("redtools")

GENERIC_ERROR_MESSAGE = "Something went wrong. See the log for details."


class ActionGuard:
    """Allows at most one in-flight call per named action.

    Usage:
        guard = ActionGuard()
        result = guard.run("summarize", service.summarize_comments, comments)
        if result.ok:
            show(result.value)
        else:
            show_error(result.error)

    Errors never escape run(): redtools errors become their message, anything
    else is logged and replaced by a generic message.
    """

    def __init__(self):
        self._active: set[str] = set()
        self._lock = threading.Lock()

    def is_busy(self, action: str) -> bool:
        with self._lock:
            return action in self._active

    def active_actions(self) -> set[str]:
        with self._lock:
            return set(self._active)

    def begin(self, action: str) -> None:
        """Mark action as in flight.

        Raises:
            BusyError: action already running
        """
        with self._lock:
            if action in self._active:
                raise BusyError(f"'{action}' is already in progress")
            self._active.add(action)
        logger.debug(f"Action '{action}' started (active: {len(self._active)})")

    def finish(self, action: str) -> None:
        with self._lock:
            self._active.discard(action)
        logger.debug(f"Action '{action}' finished")

    def run(self, action: str, func: Callable[..., Any], *args, **kwargs) -> ActionResult:
        try:
            self.begin(action)
        except BusyError as e:
            logger.info(f"Rejected '{action}': already running")
            return ActionResult(action=action, error=e.message)

        try:
            value = func(*args, **kwargs)
            return ActionResult(action=action, value=value)
        except RedToolsError as e:
            logger.error(f"Action '{action}' failed: {e}")
            return ActionResult(action=action, error=e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in '{action}': {e}")
            return ActionResult(action=action, error=GENERIC_ERROR_MESSAGE)
        finally:
            self.finish(action)
