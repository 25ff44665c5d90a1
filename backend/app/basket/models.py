from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Item ids are "{resourceId}-{planId}"
ID_SEPARATOR = "-"


class BasketPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    period: str = Field(..., examples=["3 months"])
    months: int
    price: float
    discount: Optional[float] = None


class BasketItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., examples=["66b1f0c2-quarterly"])
    name: str
    price: float
    image: Optional[str] = None
    plan: BasketPlan

    @property
    def resource_id(self) -> str:
        return resource_id_of(self.id)


class BasketState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[BasketItem, ...] = ()

    @property
    def total(self) -> float:
        return sum(item.price for item in self.items)


def resource_id_of(item_id: str) -> str:
    return item_id.split(ID_SEPARATOR, 1)[0]
