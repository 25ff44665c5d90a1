import json

import pytest

from app.basket.models import BasketItem, BasketPlan, BasketState
from app.basket.reducers import AddItem, ClearBasket, RemoveItem, add_item, reduce, remove_item
from app.basket.storage import JsonFileStorage, MemoryStorage
from app.basket.store import PERSIST_KEY, BasketStore

MONTHLY = BasketPlan(id="monthly", period="1 month", months=1, price=49.0)
QUARTERLY = BasketPlan(id="quarterly", period="3 months", months=3, price=129.0, discount=12.0)


def make_item(resource: str, plan: BasketPlan = MONTHLY, name: str = "BTC Scalper") -> BasketItem:
    return BasketItem(id=f"{resource}-{plan.id}", name=name, price=plan.price, plan=plan)


class TestReducers:
    def test_same_resource_replaces_in_place(self) -> None:
        state = BasketState()
        state = add_item(state, make_item("btc"))
        state = add_item(state, make_item("eth", name="ETH Swing"))
        state = add_item(state, make_item("btc", QUARTERLY))

        assert [item.id for item in state.items] == ["btc-quarterly", "eth-monthly"]
        assert state.total == pytest.approx(178.0)

    def test_input_state_is_untouched(self) -> None:
        empty = BasketState()
        add_item(empty, make_item("btc"))
        assert empty.items == ()

    def test_remove_unknown_id_is_a_no_op(self) -> None:
        state = add_item(BasketState(), make_item("btc"))
        assert remove_item(state, "eth-monthly") is state

    def test_reduce_dispatches_actions(self) -> None:
        state = reduce(None, AddItem(make_item("btc")))
        state = reduce(state, AddItem(make_item("eth")))
        state = reduce(state, RemoveItem("btc-monthly"))
        assert [item.id for item in state.items] == ["eth-monthly"]
        assert reduce(state, ClearBasket()).items == ()

    def test_resource_id_splits_on_first_separator(self) -> None:
        item = BasketItem(id="abc-six-months", name="x", price=1.0, plan=MONTHLY)
        assert item.resource_id == "abc"


class TestBasketStore:
    def test_changes_are_persisted_under_root(self) -> None:
        storage = MemoryStorage()
        store = BasketStore(storage)
        store.add_item(make_item("btc"))

        saved = json.loads(storage.data[PERSIST_KEY])
        assert [item["id"] for item in saved["items"]] == ["btc-monthly"]

    def test_rehydrates_from_storage(self) -> None:
        storage = MemoryStorage()
        BasketStore(storage).add_item(make_item("btc", QUARTERLY))

        restored = BasketStore(storage)
        assert restored.items == (make_item("btc", QUARTERLY),)

    def test_unreadable_payload_starts_empty(self) -> None:
        store = BasketStore(MemoryStorage({PERSIST_KEY: "{not json"}))
        assert store.items == ()

    def test_listeners_are_notified_until_unsubscribed(self) -> None:
        store = BasketStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.add_item(make_item("btc"))
        store.remove_item("missing-monthly")
        unsubscribe()
        store.clear_basket()

        assert len(seen) == 1
        assert seen[0].items[0].id == "btc-monthly"

    def test_clear_basket(self) -> None:
        store = BasketStore()
        store.add_item(make_item("btc"))
        store.add_item(make_item("eth"))
        assert store.clear_basket().items == ()

    def test_json_file_storage_round_trip(self, tmp_path) -> None:
        path = tmp_path / "state" / "basket.json"
        BasketStore(JsonFileStorage(path)).add_item(make_item("btc"))

        assert path.exists()
        assert BasketStore(JsonFileStorage(path)).items[0].id == "btc-monthly"


class FailingStorage(MemoryStorage):
    def save(self, key: str, payload: str) -> None:
        raise OSError("disk full")


class TestStorageFailures:
    def test_failed_save_leaves_basket_unchanged(self) -> None:
        store = BasketStore(FailingStorage())
        seen = []
        store.subscribe(seen.append)

        state = store.add_item(make_item("btc"))

        assert state.items == ()
        assert store.items == ()
        assert seen == []

    def test_failed_save_keeps_previous_state(self) -> None:
        storage = MemoryStorage()
        store = BasketStore(storage)
        store.add_item(make_item("btc"))
        store.storage = FailingStorage()

        store.add_item(make_item("btc", QUARTERLY))
        assert [item.id for item in store.items] == ["btc-monthly"]

    def test_unsubscribe_twice_is_harmless(self) -> None:
        store = BasketStore()
        unsubscribe = store.subscribe(lambda state: None)
        unsubscribe()
        unsubscribe()
        store.add_item(make_item("btc"))
