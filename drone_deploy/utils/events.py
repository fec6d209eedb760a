"""Progress events published by a deploy run."""
import inspect
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

# Event name -> arguments passed to listeners
DEPLOY_EVENTS = {
    "phase_start": ("phase", "message"),
    "phase_complete": ("phase", "message"),
    "artifact_skipped": ("path",),
    "artifact_start": ("artifact",),
    "artifact_uploaded": ("artifact",),
    "artifact_dropped": ("bundle", "feature"),
    "error": ("phase", "exception"),
}


class EventEmitter:
    """
    Dispatches deploy progress to listeners.

    Only names from DEPLOY_EVENTS can be subscribed, so a misspelled
    event fails at subscription instead of never firing. Listeners may be
    plain or async callables; their errors are logged and never change
    the outcome of the run.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        if event_name not in DEPLOY_EVENTS:
            raise ValueError(
                f"unknown deploy event {event_name!r}, expected one of: {', '.join(DEPLOY_EVENTS)}"
            )
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    async def emit(self, event_name: str, *args):
        for callback in list(self._listeners.get(event_name, ())):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")
