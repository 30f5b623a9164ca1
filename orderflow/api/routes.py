from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from orderflow.application.service import OrderService
from orderflow.application.schemas import (
    ActivityFilters,
    ActivityRead,
    OrderCreate,
    OrderPatch,
    OrderRead,
    OrderStatusRead,
)
from .deps import Caller, get_caller, get_order_service, require_privileged

router = APIRouter(prefix="/orders", tags=["orders"])

@router.get("/", response_model=list[OrderRead])
def list_orders(caller: Caller = Depends(get_caller), service: OrderService = Depends(get_order_service)):
    """List orders visible to the caller's role, newest first."""
    return service.get_all_orders(caller.role, caller.account_id)

@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, caller: Caller = Depends(get_caller), service: OrderService = Depends(get_order_service)):
    order = service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if not caller.is_privileged:
        # Users only see their own orders, without the account projection
        if order.account_id != caller.account_id:
            raise HTTPException(status_code=404, detail="Order not found")
        order.account = None
    return order

@router.post("/", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, caller: Caller = Depends(get_caller), service: OrderService = Depends(get_order_service)):
    return service.create_order(caller.account_id, payload, caller.ip_address, caller.browser_info)

@router.put("/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderPatch, caller: Caller = Depends(require_privileged), service: OrderService = Depends(get_order_service)):
    return service.update_order(order_id, payload, caller.account_id, caller.ip_address, caller.browser_info)

@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(order_id: int, caller: Caller = Depends(get_caller), service: OrderService = Depends(get_order_service)):
    if not caller.is_privileged:
        # Plain users may only cancel their own orders
        service.track_order_status(order_id, caller.account_id)
    return service.cancel_order(order_id, caller.account_id, caller.ip_address, caller.browser_info)

@router.post("/{order_id}/process", response_model=OrderRead)
def process_order(order_id: int, caller: Caller = Depends(require_privileged), service: OrderService = Depends(get_order_service)):
    return service.process_order(order_id, caller.account_id, caller.ip_address, caller.browser_info)

@router.post("/{order_id}/ship", response_model=OrderRead)
def ship_order(order_id: int, caller: Caller = Depends(require_privileged), service: OrderService = Depends(get_order_service)):
    return service.ship_order(order_id, caller.account_id, caller.ip_address, caller.browser_info)

@router.post("/{order_id}/deliver", response_model=OrderRead)
def deliver_order(order_id: int, caller: Caller = Depends(require_privileged), service: OrderService = Depends(get_order_service)):
    return service.deliver_order(order_id, caller.account_id, caller.ip_address, caller.browser_info)

@router.get("/{order_id}/status", response_model=OrderStatusRead)
def track_order_status(order_id: int, caller: Caller = Depends(get_caller), service: OrderService = Depends(get_order_service)):
    status = service.track_order_status(order_id, caller.account_id)
    return OrderStatusRead(order_id=order_id, order_status=status)

@router.get("/{order_id}/activities", response_model=list[ActivityRead])
def list_order_activities(
    order_id: int,
    action: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: Optional[int] = Query(default=None, gt=0),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(get_caller),
    service: OrderService = Depends(get_order_service),
):
    """Audit trail of an order; plain users only see their own entries."""
    filters = ActivityFilters(action=action, start_date=start_date, end_date=end_date, limit=limit, offset=offset)
    account_id = None if caller.is_privileged else caller.account_id
    return service.get_order_activities(order_id, account_id, filters)
