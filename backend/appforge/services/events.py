"""Typed in-process events handed from the plan board to the rest of the app.

The code-generation chat subscribes to ``TicketActivated`` (a ticket moved to
in-progress, with the coding prompt to run) and ``TicketReadyForQA`` (a
ticket moved to testing, with the QA prompt).
"""

import logging
from typing import Callable, TypeVar

from pydantic import BaseModel

from appforge.schemas.plan import PlanTicket

logger = logging.getLogger(__name__)


class TicketActivated(BaseModel):
    ticket: PlanTicket
    prompt: str


class TicketReadyForQA(BaseModel):
    ticket: PlanTicket
    prompt: str


E = TypeVar("E", bound=BaseModel)


class EventBus:
    def __init__(self):
        self._handlers: dict[type, list[Callable]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: BaseModel) -> None:
        handlers = list(self._handlers.get(type(event), []))
        logger.debug(f"Publishing {type(event).__name__} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(event)
