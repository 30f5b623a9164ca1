from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from orderflow.domain.models import OrderStatus

class OrderCreate(BaseModel):
    product_id: int
    # Defaults to a single unit when omitted
    quantity: Optional[int] = Field(default=None, gt=0)
    shipping_address: str

class OrderPatch(BaseModel):
    """Fields a caller may change on an existing order.

    Amounts, quantity and ownership are fixed at creation and cannot be patched.
    """
    order_status: Optional[OrderStatus] = None
    shipping_address: Optional[str] = None
    class Config:
        extra = "forbid"

class AccountSummary(BaseModel):
    id: int
    email: str
    class Config:
        from_attributes = True

class ProductSummary(BaseModel):
    id: int
    name: str
    price: float
    class Config:
        from_attributes = True

class OrderRead(BaseModel):
    id: int
    account_id: int
    product_id: int
    quantity: int
    total_amount: float
    order_status: str
    shipping_address: Optional[str] = None
    created_at: datetime
    account: Optional[AccountSummary] = None
    product: Optional[ProductSummary] = None
    class Config:
        from_attributes = True

class OrderStatusRead(BaseModel):
    order_id: int
    order_status: str

class ActivityFilters(BaseModel):
    action: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: Optional[int] = Field(default=None, gt=0)
    offset: int = Field(default=0, ge=0)

class ActivityRead(BaseModel):
    id: int
    account_id: Optional[int] = None
    order_id: int
    action: str
    description: str
    ip_address: Optional[str] = None
    browser_info: Optional[str] = None
    timestamp: datetime
    class Config:
        from_attributes = True
