"""Store contracts consumed by the order service.

Each store wraps one kind of record. None of them knows about the others;
cross-entity rules live in ``OrderService``. The SQLAlchemy adapters in
``orderflow.infrastructure.stores`` implement these against a shared session,
and the tests substitute in-memory fakes.
"""

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from orderflow.domain.models import Account, Inventory, Order, OrderActivity, Product
from .schemas import ActivityFilters


@dataclass(frozen=True)
class OrderCriteria:
    """Selection for ``OrderStore.find_many``; results are newest first."""
    statuses: Sequence[str]
    account_id: Optional[int] = None


class AccountStore(Protocol):
    def find_by_key(self, account_id: int) -> Optional[Account]: ...


class ProductStore(Protocol):
    def find_by_key(self, product_id: int) -> Optional[Product]: ...

    def persist(self, product: Product) -> None: ...


class InventoryStore(Protocol):
    def find_by_product(self, product_id: int, lock: bool = False) -> Optional[Inventory]: ...

    def persist(self, inventory: Inventory) -> None: ...


class OrderStore(Protocol):
    def find_by_key(self, order_id: int) -> Optional[Order]: ...

    def find_one(self, order_id: int, account_id: int) -> Optional[Order]: ...

    def find_many(self, criteria: OrderCriteria) -> List[Order]: ...

    def create(self, fields: Dict[str, Any]) -> Order: ...

    def persist(self, order: Order) -> None: ...


class ActivityLogger(Protocol):
    def record(
        self,
        account_id: Optional[int],
        order_id: int,
        action: str,
        description: str,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> None: ...

    def query(
        self,
        account_id: Optional[int],
        order_id: int,
        filters: Optional[ActivityFilters] = None,
    ) -> List[OrderActivity]: ...


class UnitOfWork(Protocol):
    def transaction(self) -> AbstractContextManager: ...
