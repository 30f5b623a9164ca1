"""SQLAlchemy implementations of the order service store contracts.

All stores built for one request share a single ``Session``; writes are
flushed immediately and committed by ``SessionUnitOfWork``.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from orderflow.application.ports import OrderCriteria
from orderflow.application.schemas import ActivityFilters
from orderflow.application.service import OrderService
from orderflow.domain.models import Account, Inventory, Order, OrderActivity, Product

class SessionUnitOfWork:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

class SqlAccountStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_key(self, account_id: int) -> Optional[Account]:
        return self.db.get(Account, account_id)

class SqlProductStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_key(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def persist(self, product: Product) -> None:
        self.db.add(product)
        self.db.flush()

class SqlInventoryStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_product(self, product_id: int, lock: bool = False) -> Optional[Inventory]:
        query = self.db.query(Inventory).filter(Inventory.product_id == product_id)
        if lock:
            # Row lock held until the surrounding transaction ends
            query = query.with_for_update()
        return query.first()

    def persist(self, inventory: Inventory) -> None:
        self.db.add(inventory)
        self.db.flush()

class SqlOrderStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_key(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def find_one(self, order_id: int, account_id: int) -> Optional[Order]:
        return self.db.query(Order).filter(
            Order.id == order_id,
            Order.account_id == account_id
        ).first()

    def find_many(self, criteria: OrderCriteria) -> List[Order]:
        query = self.db.query(Order).options(
            selectinload(Order.account),
            selectinload(Order.product)
        ).filter(Order.order_status.in_(list(criteria.statuses)))
        if criteria.account_id is not None:
            query = query.filter(Order.account_id == criteria.account_id)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def create(self, fields: Dict[str, Any]) -> Order:
        order = Order(**fields)
        self.db.add(order)
        self.db.flush()  # assign id
        return order

    def persist(self, order: Order) -> None:
        self.db.add(order)
        self.db.flush()

class SqlActivityLogger:
    """Append-only order activity log stored in ``order_activities``."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        account_id: Optional[int],
        order_id: int,
        action: str,
        description: str,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> None:
        self.db.add(OrderActivity(
            account_id=account_id,
            order_id=order_id,
            action=action,
            description=description,
            ip_address=ip_address,
            browser_info=browser_info,
        ))
        self.db.flush()

    def query(
        self,
        account_id: Optional[int],
        order_id: int,
        filters: Optional[ActivityFilters] = None,
    ) -> List[OrderActivity]:
        filters = filters or ActivityFilters()
        query = self.db.query(OrderActivity).filter(OrderActivity.order_id == order_id)
        if account_id is not None:
            query = query.filter(OrderActivity.account_id == account_id)
        if filters.action:
            query = query.filter(OrderActivity.action == filters.action)
        if filters.start_date:
            query = query.filter(OrderActivity.timestamp >= filters.start_date)
        if filters.end_date:
            query = query.filter(OrderActivity.timestamp <= filters.end_date)
        query = query.order_by(OrderActivity.timestamp.asc(), OrderActivity.id.asc()).offset(filters.offset)
        if filters.limit:
            query = query.limit(filters.limit)
        return query.all()

def build_order_service(db: Session) -> OrderService:
    return OrderService(
        accounts=SqlAccountStore(db),
        products=SqlProductStore(db),
        inventory=SqlInventoryStore(db),
        orders=SqlOrderStore(db),
        activities=SqlActivityLogger(db),
        uow=SessionUnitOfWork(db),
    )
