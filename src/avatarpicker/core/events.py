"""EventBus for decoupled publish/subscribe communication."""

from enum import Enum, auto
from typing import Any, Callable
from collections import defaultdict


class EventType(Enum):
    # Catalog
    CATALOG_LOADED = auto()          # data: bodies (int), items (int), skins (int)

    # Loading events
    LOADING_STARTED = auto()         # data: url (str), items_loaded (int), items_total (int)
    LOADING_PROGRESS = auto()        # data: url (str), items_loaded (int), items_total (int)
    LOAD_FAILED = auto()             # data: url (str), error (Exception)
    BODY_COMPOSED = auto()           # data: name (str)
    LOADING_COMPLETE = auto()        # data: failed (list[str])

    # Selection
    SELECTION_CHANGED = auto()       # data: body (str | None), items (list[str]), skin (str | None)
    SKIN_APPLIED = auto()            # data: body (str), skin (str)
    COMPLETENESS_CHANGED = auto()    # data: complete (bool), ready (bool)
    SELECTION_WARNING = auto()       # data: error (AvatarError)


class EventBus:
    """Simple publish/subscribe event system."""

    def __init__(self):
        self._handlers: dict[EventType, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: Callable) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Callable) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: EventType, **data: Any) -> None:
        for handler in list(self._handlers[event_type]):
            handler(**data)

    def clear(self) -> None:
        self._handlers.clear()
