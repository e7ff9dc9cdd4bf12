"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands. Quantities are not range-checked here; the domain
rejects negative values with a structured error.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(min_length=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


class SaveCartRequest(BaseModel):
    cart_items: dict[str, int] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_items": {"prod-001": 2, "prod-002": 1},
                }
            ]
        }
    }


class CartResponse(BaseModel):
    cart_items: dict[str, int]
    count: int
    amount: float


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class CheckoutItemSchema(BaseModel):
    product_id: str
    quantity: int


class CheckoutRequest(BaseModel):
    address_id: str = ""
    items: list[CheckoutItemSchema] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "address_id": "addr-001",
                    "items": [
                        {"product_id": "prod-001", "quantity": 2},
                        {"product_id": "prod-002", "quantity": 1},
                    ],
                }
            ]
        }
    }


class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int


class OrderSchema(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemSchema]
    amount: float
    address_id: str
    status: str
    created_at: datetime | None = None

    @classmethod
    def from_aggregate(cls, order) -> "OrderSchema":
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            items=[OrderItemSchema(product_id=str(item.product_id), quantity=item.quantity) for item in order.items],
            amount=order.amount,
            address_id=order.address_id,
            status=order.status,
            created_at=order.created_at,
        )


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CheckoutResponse(BaseModel):
    success: bool
    message: str | None = None
    order: OrderSchema | None = None


class FailureResponse(BaseModel):
    success: bool = False
    message: str
