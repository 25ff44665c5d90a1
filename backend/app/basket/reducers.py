"""
Pure reductions over the basket. Each returns a new BasketState and never
raises; the input state is left untouched.
"""
from dataclasses import dataclass
from typing import Optional, Union

from app.basket.models import BasketItem, BasketState


def add_item(state: BasketState, item: BasketItem) -> BasketState:
    """Add an item, replacing in place any item for the same resource."""
    items = list(state.items)
    for index, existing in enumerate(items):
        if existing.resource_id == item.resource_id:
            items[index] = item
            break
    else:
        items.append(item)
    return BasketState(items=tuple(items))


def remove_item(state: BasketState, item_id: str) -> BasketState:
    items = tuple(item for item in state.items if item.id != item_id)
    if len(items) == len(state.items):
        return state
    return BasketState(items=items)


def clear_basket(state: BasketState) -> BasketState:
    return BasketState()


@dataclass(frozen=True)
class AddItem:
    item: BasketItem


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class ClearBasket:
    pass


BasketAction = Union[AddItem, RemoveItem, ClearBasket]


def reduce(state: Optional[BasketState], action: BasketAction) -> BasketState:
    state = state or BasketState()
    if isinstance(action, AddItem):
        return add_item(state, action.item)
    if isinstance(action, RemoveItem):
        return remove_item(state, action.item_id)
    if isinstance(action, ClearBasket):
        return clear_basket(state)
    return state
