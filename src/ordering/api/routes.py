"""FastAPI routes for the Ordering domain: the caller's cart and checkout.

Every failure is answered with ``{"success": false, "message": ...}`` and a
status code chosen from the error type.
"""

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError
from protean.utils.globals import current_domain

from ordering.api.auth import require_user, resolve_user
from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    FailureResponse,
    OrderSchema,
    SaveCartRequest,
    UpdateCartQuantityRequest,
)
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart, ClearCart, SaveCart, UpdateCartQuantity
from ordering.cart.persistence import load_cart
from ordering.catalog import get_catalog
from ordering.dispatch import dispatch
from ordering.errors import CheckoutInProgress, PersistenceFailure, Unauthorized, error_message
from ordering.order.order import Order
from ordering.order.placement import checkout
from ordering.utils.logging import get_logger

logger = get_logger(__name__)

# Checked in order; ProductNotFound is an ObjectNotFoundError
_ERROR_STATUS = (
    (Unauthorized, 401),
    (CheckoutInProgress, 409),
    (PersistenceFailure, 503),
    (ObjectNotFoundError, 404),
    (ValidationError, 400),
)


def failure_response(exc: Exception) -> JSONResponse:
    status_code = next((code for error_cls, code in _ERROR_STATUS if isinstance(exc, error_cls)), 400)
    body = FailureResponse(message=error_message(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        cart_items=cart.snapshot(),
        count=cart.count(),
        amount=cart.total_amount(get_catalog().snapshot()),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(user_id: str | None = Depends(resolve_user)):
    try:
        cart = load_cart(require_user(user_id))
    except ProteanException as exc:
        return failure_response(exc)
    return _cart_response(cart)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, user_id: str | None = Depends(resolve_user)):
    try:
        command = AddToCart(user_id=require_user(user_id), product_id=body.product_id)
        dispatch(command)
        cart = load_cart(user_id)
    except ProteanException as exc:
        return failure_response(exc)
    return _cart_response(cart)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item_quantity(
    product_id: str,
    body: UpdateCartQuantityRequest,
    user_id: str | None = Depends(resolve_user),
):
    try:
        command = UpdateCartQuantity(
            user_id=require_user(user_id),
            product_id=product_id,
            quantity=body.quantity,
        )
        dispatch(command)
        cart = load_cart(user_id)
    except ProteanException as exc:
        return failure_response(exc)
    return _cart_response(cart)


@cart_router.put("", response_model=CartResponse)
async def save_cart(body: SaveCartRequest, user_id: str | None = Depends(resolve_user)):
    try:
        command = SaveCart(user_id=require_user(user_id), cart_items=body.cart_items)
        dispatch(command)
        cart = load_cart(user_id)
    except ProteanException as exc:
        return failure_response(exc)
    return _cart_response(cart)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(user_id: str | None = Depends(resolve_user)):
    try:
        dispatch(ClearCart(user_id=require_user(user_id)))
        cart = load_cart(user_id)
    except ProteanException as exc:
        return failure_response(exc)
    return _cart_response(cart)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/create", status_code=201, response_model=CheckoutResponse)
async def create_order(
    body: CheckoutRequest,
    user_id: str | None = Depends(resolve_user),
    idempotency_key: str | None = Header(default=None),
):
    """Place an order from a cart snapshot.

    1. Price every item against the catalog and record the order
    2. Clear the caller's stored cart
    """
    try:
        order = checkout(
            user_id=user_id,
            address_id=body.address_id,
            items=[item.model_dump() for item in body.items],
            idempotency_key=idempotency_key,
        )
    except ProteanException as exc:
        return failure_response(exc)

    try:
        dispatch(ClearCart(user_id=user_id))
    except ProteanException as exc:
        # Order is already recorded
        logger.warning("cart_clear_after_checkout_failed", user_id=user_id, error=error_message(exc))

    return CheckoutResponse(success=True, order=OrderSchema.from_aggregate(order))


@order_router.get("/{order_id}", response_model=OrderSchema)
async def get_order(order_id: str, user_id: str | None = Depends(resolve_user)):
    try:
        require_user(user_id)
        order = current_domain.repository_for(Order).get(order_id)
        if str(order.user_id) != user_id:
            raise ObjectNotFoundError({"order_id": [f"Order {order_id} not found"]})
    except ProteanException as exc:
        return failure_response(exc)
    return OrderSchema.from_aggregate(order)
