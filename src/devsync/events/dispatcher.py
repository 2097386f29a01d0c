from __future__ import annotations

import logging
from typing import Any

from devsync.events.observer import EventObserver
from devsync.events.types import EVENT_TYPE_MAP

logger = logging.getLogger(__name__)


class EventDispatcher:
    def __init__(self, *observers: EventObserver) -> None:
        self._observers: list[EventObserver] = list(observers)

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def emit(self, event_type: str, **data: Any) -> None:
        try:
            event_cls = EVENT_TYPE_MAP[event_type]
        except KeyError:
            raise ValueError(f"Unknown event type: {event_type}") from None
        event = event_cls(**data)
        logger.debug("Event %s: %s", event_type, data)
        for observer in self._observers:
            observer.on_event(event)
