"""In-memory state holders mirrored to durable storage.

``PersistentStore`` is a small observer: ``set`` replaces the value, writes
it to storage (one write per mutation, best effort) and then notifies every
subscriber. ``WizardStore`` adds the wizard-specific load path (migration,
``isProcessing`` reset), full-state restore and session reset.

Stores are plain objects owned by the application root and passed to the
services that need them; there is no module-level instance.
"""

import json
import logging
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

from appforge.migrations.runner import migrate
from appforge.schemas.wizard import WizardState
from appforge.services.storage import WizardStorage

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)
Listener = Callable[[Any], None]

DEFAULT_STORAGE_KEY = "appforge_design_wizard_state"


class PersistentStore(Generic[S]):
    def __init__(self, storage: WizardStorage | None, storage_key: str):
        self.storage = storage
        self.storage_key = storage_key
        self._listeners: list[Listener] = []
        self._state: S = self._load_initial_state()

    # ── Hooks ───────────────────────────────────────────────

    def default_state(self) -> S:
        raise NotImplementedError

    def deserialize(self, raw: Any) -> S:
        raise NotImplementedError

    def serialize(self, state: S) -> str:
        return state.model_dump_json(by_alias=True)

    # ── Observer API ────────────────────────────────────────

    def get(self) -> S:
        return self._state

    def set(self, state: S) -> None:
        self._state = state
        self._persist(state)
        self._notify(state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: S) -> None:
        for listener in list(self._listeners):
            listener(state)

    # ── Persistence ─────────────────────────────────────────

    def _load_initial_state(self) -> S:
        if self.storage is None:
            return self.default_state()
        try:
            saved = self.storage.get(self.storage_key)
            if saved:
                state = self.deserialize(json.loads(saved))
                logger.info(f"Restored {self.storage_key} from storage")
                return state
        except Exception:
            # A corrupt cache must not block the user from starting fresh
            logger.error(f"Failed to load {self.storage_key} from storage", exc_info=True)
        return self.default_state()

    def _persist(self, state: S) -> None:
        if self.storage is None:
            return
        try:
            self.storage.set(self.storage_key, self.serialize(state))
            logger.debug(f"Auto-saved {self.storage_key}")
        except Exception:
            logger.error(f"Failed to save {self.storage_key} to storage", exc_info=True)

    def _clear_storage(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.remove(self.storage_key)
            logger.info(f"Cleared {self.storage_key} from storage")
        except Exception:
            logger.error(f"Failed to clear {self.storage_key} from storage", exc_info=True)


class WizardStore(PersistentStore[WizardState]):
    """Holder of the design wizard state.

    ``epoch`` changes whenever the whole state is replaced (restore or
    reset). Code that awaits an external call can capture it first and
    check ``is_current(epoch)`` before applying a late result.
    """

    def __init__(self, storage: WizardStorage | None = None, storage_key: str = DEFAULT_STORAGE_KEY):
        self.epoch = 0
        super().__init__(storage, storage_key)

    def default_state(self) -> WizardState:
        return WizardState()

    def deserialize(self, raw: Any) -> WizardState:
        # Never restore isProcessing as true
        return migrate(raw).model_copy(update={"is_processing": False})

    def serialize(self, state: WizardState) -> str:
        if state.is_processing:
            state = state.model_copy(update={"is_processing": False})
        return state.model_dump_json(by_alias=True)

    def load(self, data: Any) -> WizardState:
        """Replace the whole state with a previously-saved project."""
        state = self.deserialize(data)
        self.epoch += 1
        self.set(state)
        return state

    def reset(self) -> None:
        """Clear the session: default state in memory, nothing in storage."""
        self.epoch += 1
        self._state = self.default_state()
        self._clear_storage()
        self._notify(self._state)

    def is_current(self, epoch: int) -> bool:
        return epoch == self.epoch
