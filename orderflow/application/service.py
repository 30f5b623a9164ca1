from typing import List, Optional
from orderflow.core import get_logger
from orderflow.domain.models import Order, OrderStatus, ProductStatus, Role, VISIBLE_STATUSES
from .errors import (
    AccountNotFound,
    InsufficientStock,
    InventoryMissing,
    OrderAlreadyCancelled,
    OrderNotCancellable,
    OrderNotFound,
    ProductNotFound,
    ProductUnavailable,
    UnauthorizedAccess,
)
from .ports import (
    AccountStore,
    ActivityLogger,
    InventoryStore,
    OrderCriteria,
    OrderStore,
    ProductStore,
    UnitOfWork,
)
from .schemas import ActivityFilters, ActivityRead, OrderCreate, OrderPatch, OrderRead

logger = get_logger(__name__)

DEFAULT_QUANTITY = 1
CANCELLABLE_STATUSES = (OrderStatus.PENDING.value, OrderStatus.PROCESSING.value)

class OrderService:
    def __init__(
        self,
        accounts: AccountStore,
        products: ProductStore,
        inventory: InventoryStore,
        orders: OrderStore,
        activities: ActivityLogger,
        uow: UnitOfWork,
    ):
        self.accounts = accounts
        self.products = products
        self.inventory = inventory
        self.orders = orders
        self.activities = activities
        self.uow = uow

    # Queries

    def get_all_orders(self, role: str, account_id: Optional[int]) -> List[OrderRead]:
        """List orders visible to the caller, newest first.

        ``User`` callers only see their own orders and get no account projection;
        every other role sees all accounts. Cancelled orders are never listed.
        """
        is_user = role == Role.USER.value
        statuses = [s.value for s in VISIBLE_STATUSES]
        if is_user:
            criteria = OrderCriteria(statuses=statuses, account_id=account_id)
        else:
            criteria = OrderCriteria(statuses=statuses)

        results = []
        for order in self.orders.find_many(criteria):
            read = OrderRead.model_validate(order)
            if is_user:
                read.account = None
            results.append(read)
        return results

    def get_order_by_id(self, order_id: int) -> Optional[OrderRead]:
        order = self.orders.find_by_key(order_id)
        if not order:
            return None
        return OrderRead.model_validate(order)

    def track_order_status(self, order_id: int, account_id: int) -> str:
        # Ownership-scoped regardless of role
        order = self.orders.find_one(order_id, account_id)
        if not order:
            raise UnauthorizedAccess()
        return order.order_status

    def get_order_activities(
        self,
        order_id: int,
        account_id: Optional[int],
        filters: Optional[ActivityFilters] = None,
    ) -> List[ActivityRead]:
        if not self.orders.find_by_key(order_id):
            raise self._rejected(OrderNotFound(), order_id=order_id)
        rows = self.activities.query(account_id, order_id, filters or ActivityFilters())
        return [ActivityRead.model_validate(row) for row in rows]

    # Creation

    def create_order(
        self,
        account_id: int,
        data: OrderCreate,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        """Create a pending order and reserve its stock.

        Validation stops at the first failing rule. The order row, its
        ``created`` activity and the inventory decrement are written in one
        transaction; the inventory row stays locked until it commits.
        """
        with self.uow.transaction():
            account = self.accounts.find_by_key(account_id)
            if not account:
                raise self._rejected(AccountNotFound(), account_id=account_id)

            product = self.products.find_by_key(data.product_id)
            if not product:
                raise self._rejected(ProductNotFound(), product_id=data.product_id)
            if product.product_status != ProductStatus.ACTIVE.value:
                raise self._rejected(ProductUnavailable(), product_id=product.id)

            inventory = self.inventory.find_by_product(product.id, lock=True)
            if not inventory:
                raise self._rejected(InventoryMissing(), product_id=product.id)

            quantity = data.quantity or DEFAULT_QUANTITY
            if quantity > inventory.quantity:
                raise self._rejected(
                    InsufficientStock(inventory.quantity),
                    product_id=product.id,
                    requested=quantity,
                )

            total_amount = product.price * quantity
            order = self.orders.create({
                "account_id": account.id,
                "product_id": product.id,
                "quantity": quantity,
                "total_amount": total_amount,
                "order_status": OrderStatus.PENDING.value,
                "shipping_address": data.shipping_address,
            })
            self.activities.record(
                account.id,
                order.id,
                "created",
                f"Created order for {quantity} units of product {product.name}",
                ip_address,
                browser_info,
            )
            inventory.quantity -= quantity
            self.inventory.persist(inventory)
            created = OrderRead.model_validate(order)

        logger.info(
            f"Order {created.id} created",
            extra={'extra_fields': {
                'order_id': created.id,
                'account_id': account_id,
                'product_id': data.product_id,
                'quantity': quantity,
                'total_amount': created.total_amount,
            }}
        )
        return created

    # Transitions

    def update_order(
        self,
        order_id: int,
        patch: OrderPatch,
        account_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        with self.uow.transaction():
            order = self._get_open_order(order_id, "update")
            old_status = order.order_status
            for field, value in patch.model_dump(exclude_unset=True, exclude_none=True).items():
                if isinstance(value, OrderStatus):
                    value = value.value
                setattr(order, field, value)
            self.orders.persist(order)
            self.activities.record(
                account_id,
                order.id,
                "updated",
                f"Updated order. Status changed from '{old_status}' to '{order.order_status}'",
                ip_address,
                browser_info,
            )
            updated = OrderRead.model_validate(order)
        self._log_transition("updated", updated.id, old_status, updated.order_status)
        return updated

    def cancel_order(
        self,
        order_id: int,
        account_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        """Cancel a pending or processing order.

        Also marks the ordered product as unavailable in the catalog.
        """
        with self.uow.transaction():
            order = self._get_open_order(order_id, "cancel")
            old_status = order.order_status
            if old_status not in CANCELLABLE_STATUSES:
                raise self._rejected(OrderNotCancellable(old_status), order_id=order_id)

            order.order_status = OrderStatus.CANCELLED.value
            self.orders.persist(order)
            self.activities.record(
                account_id,
                order.id,
                "cancelled",
                f"Cancelled order. Previous status: {old_status}",
                ip_address,
                browser_info,
            )

            product = self.products.find_by_key(order.product_id)
            if product:
                product.is_available = False
                self.products.persist(product)
            cancelled = OrderRead.model_validate(order)
        self._log_transition("cancelled", cancelled.id, old_status, cancelled.order_status)
        return cancelled

    def process_order(
        self,
        order_id: int,
        account_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        return self._transition(
            order_id, OrderStatus.PROCESSING, "processed", "process",
            account_id, ip_address, browser_info, always_log=True,
        )

    def ship_order(
        self,
        order_id: int,
        account_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        # No ordering guard: any non-cancelled order may be shipped
        return self._transition(
            order_id, OrderStatus.SHIPPED, "shipped", "ship",
            account_id, ip_address, browser_info,
        )

    def deliver_order(
        self,
        order_id: int,
        account_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        browser_info: Optional[str] = None,
    ) -> OrderRead:
        return self._transition(
            order_id, OrderStatus.DELIVERED, "delivered", "deliver",
            account_id, ip_address, browser_info,
        )

    # Helpers

    def _transition(
        self,
        order_id: int,
        target: OrderStatus,
        action: str,
        verb: str,
        account_id: Optional[int],
        ip_address: Optional[str],
        browser_info: Optional[str],
        always_log: bool = False,
    ) -> OrderRead:
        """Move a non-cancelled order to ``target``.

        The activity row is written when the caller identified itself, or
        unconditionally when ``always_log`` is set.
        """
        with self.uow.transaction():
            order = self._get_open_order(order_id, verb)
            old_status = order.order_status
            order.order_status = target.value
            self.orders.persist(order)
            if always_log or account_id is not None:
                self.activities.record(
                    account_id,
                    order.id,
                    action,
                    f"{action.capitalize()} order. Status changed from '{old_status}' to '{target.value}'",
                    ip_address,
                    browser_info,
                )
            result = OrderRead.model_validate(order)
        self._log_transition(action, result.id, old_status, result.order_status)
        return result

    def _get_open_order(self, order_id: int, verb: str) -> Order:
        order = self.orders.find_by_key(order_id)
        if not order:
            raise self._rejected(OrderNotFound(), order_id=order_id)
        if order.order_status == OrderStatus.CANCELLED.value:
            if verb == "cancel":
                raise self._rejected(OrderAlreadyCancelled(), order_id=order_id)
            raise self._rejected(
                OrderAlreadyCancelled(f"Cannot {verb} a cancelled order"), order_id=order_id
            )
        return order

    @staticmethod
    def _rejected(error, **context):
        logger.warning(
            f"Order request rejected: {error}",
            extra={'extra_fields': {'code': error.code, **context}}
        )
        return error

    @staticmethod
    def _log_transition(action: str, order_id: int, old_status: str, new_status: str) -> None:
        logger.info(
            f"Order {order_id} {action}",
            extra={'extra_fields': {
                'order_id': order_id,
                'action': action,
                'from_status': old_status,
                'to_status': new_status,
            }}
        )
