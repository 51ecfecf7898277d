"""Step events published by the orchestrator."""
import inspect
import logging
from collections import defaultdict
from typing import Callable, DefaultDict, List

logger = logging.getLogger(__name__)

STEP_START = "step_start"
STEP_COMPLETE = "step_complete"
STEP_SKIP = "step_skip"
STEP_FAIL = "step_fail"
REPORT_LINK = "report_link"


class EventEmitter:
    """Ordered listeners per step event; sync and async callbacks both work."""

    def __init__(self):
        self._listeners: DefaultDict[str, List[Callable]] = defaultdict(list)

    def on(self, event_name: str, callback: Callable) -> None:
        listeners = self._listeners[event_name]
        if callback not in listeners:
            listeners.append(callback)

    async def emit(self, event_name: str, *args) -> None:
        """Call every listener in order. A failing listener is logged and skipped."""
        for callback in list(self._listeners.get(event_name, ())):
            try:
                outcome = callback(*args)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Listener for %s failed", event_name)
