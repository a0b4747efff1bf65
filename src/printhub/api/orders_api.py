"""
Orders API - Order submission, listing and status management.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .auth import optional_user, require_admin, require_user
from .catalog_api import http_error
from ..utils.formatters import get_status_text
from .quotes_api import PrintItemModel, check_page_limit
from .state import AppState, get_state

router = APIRouter(prefix="/api/orders", tags=["orders"])


class CustomerModel(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None


class OrderCreate(BaseModel):
    """Request model for placing an order."""
    customer: CustomerModel
    files: list[PrintItemModel] = Field(..., min_length=1)
    delivery_type: str = "pickup"
    delivery_details: dict = {}


class StatusUpdate(BaseModel):
    status: str


def order_payload(order: dict) -> dict:
    return {**order, 'status_text': get_status_text(order.get('status'))}


@router.get("")
async def list_orders(status: Optional[str] = None, state: AppState = Depends(get_state),
                      user: dict = Depends(require_user)):
    """The caller's orders, or every order for admins."""
    return [order_payload(o) for o in state.orders.list_orders(user=user, status=status)]


@router.get("/{order_id}")
async def get_order(order_id: str, state: AppState = Depends(get_state),
                    user: dict = Depends(require_user)):
    order = state.orders.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if not state.users.is_admin(user) and order.get('user_id') != user['id']:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_payload(order)


@router.post("", status_code=201)
async def create_order(data: OrderCreate, state: AppState = Depends(get_state),
                       user: Optional[dict] = Depends(optional_user)):
    """Place an order; guests are priced at the regular tier."""
    check_page_limit(data.files, state.settings.max_pages)
    try:
        order = state.orders.place_order(
            items=[f.to_item() for f in data.files],
            customer=data.customer.model_dump(),
            user=user,
            delivery_type=data.delivery_type,
            delivery_details=data.delivery_details,
        )
    except ValueError as e:
        raise http_error(e)
    return order_payload(order)


@router.put("/{order_id}")
async def update_order_status(order_id: str, update: StatusUpdate, state: AppState = Depends(get_state),
                              _admin: dict = Depends(require_admin)):
    try:
        order = state.orders.update_status(order_id, update.status)
    except ValueError as e:
        raise http_error(e)
    return {"message": "Order updated", "order": order_payload(order)}
