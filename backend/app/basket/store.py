import logging
from typing import Callable, List, Optional

from pydantic import ValidationError

from app.basket.models import BasketItem, BasketState
from app.basket.reducers import AddItem, BasketAction, ClearBasket, RemoveItem, reduce
from app.basket.storage import MemoryStorage, StorageAdapter

logger = logging.getLogger(__name__)

PERSIST_KEY = "root"

Listener = Callable[[BasketState], None]


class BasketStore:
    """
    Explicit state container for the basket. Persists every change through
    the injected storage adapter and rehydrates from it on construction.
    """

    def __init__(self, storage: Optional[StorageAdapter] = None, key: str = PERSIST_KEY):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self._listeners: List[Listener] = []
        self._state = self._rehydrate()

    @property
    def state(self) -> BasketState:
        return self._state

    @property
    def items(self):
        return self._state.items

    def _rehydrate(self) -> BasketState:
        payload = self.storage.load(self.key)
        if not payload:
            return BasketState()
        try:
            return BasketState.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"[BASKET] Discarding unreadable persisted basket: {e}")
            return BasketState()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: BasketAction) -> BasketState:
        new_state = reduce(self._state, action)
        if new_state is self._state:
            return new_state
        try:
            self.storage.save(self.key, new_state.model_dump_json())
        except Exception as e:
            logger.error(f"[BASKET] Could not persist basket, change discarded: {e}", exc_info=True)
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def add_item(self, item: BasketItem) -> BasketState:
        return self.dispatch(AddItem(item))

    def remove_item(self, item_id: str) -> BasketState:
        return self.dispatch(RemoveItem(item_id))

    def clear_basket(self) -> BasketState:
        return self.dispatch(ClearBasket())
