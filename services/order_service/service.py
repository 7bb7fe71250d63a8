"""
Order placement and lifecycle.

`OrderService.create_order` is the only path that takes stock out of the
catalog. The whole cart is handled in one database transaction on the
request session. The order reference is drawn first, while no row lock is
held. The cart's products are then locked in id order, and each line is
checked, decremented and flushed in the order it was submitted. Finally the
order is inserted and the transaction is committed once. Any failure rolls
the transaction back, so a cart either reserves stock for every line or for
none of them.
"""
import time
import uuid
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.service import AuthService
from services.product_service.repository import ProductRepository
from shared.exceptions import (
    AccessDenied,
    DomainError,
    InsufficientStock,
    InvalidState,
    OrderNotFound,
    ProductNotFound,
    ReferenceCollision,
)
from shared.observability.metrics import (
    cafe_order_creation_duration_seconds,
    cafe_order_status_changes_total,
    cafe_orders_created_total,
    cafe_reference_collisions_total,
    cafe_stock_rejections_total,
)
from shared.pagination import PagedResponse, PageParams
from shared.security.principal import CurrentUser
from .models import STANDARD_TRANSITIONS, Order, OrderItem, OrderStatus
from .reference import ReferenceGenerator
from .repository import OrderRepository
from .schemas import OrderCreate, OrderResponse

logger = structlog.get_logger(__name__)


def _to_page(orders, total: int, params: PageParams) -> PagedResponse[OrderResponse]:
    return PagedResponse[OrderResponse].of(
        [OrderResponse.model_validate(o) for o in orders], total, params
    )


class OrderService:
    references = ReferenceGenerator()

    @staticmethod
    async def create_order(db: AsyncSession, data: OrderCreate, caller_id: uuid.UUID) -> Order:
        """
        Reserve stock for every cart line and persist a PENDING order.

        Raises:
            UserNotFound: the caller does not resolve to a user.
            ProductNotFound: a line references an unknown product.
            InsufficientStock: a line asks for more than is on hand.
        """
        started = time.perf_counter()
        try:
            order = await OrderService._place_order(db, data, caller_id)
            await db.commit()
        except DomainError as exc:
            await db.rollback()
            cafe_orders_created_total.labels(status="rejected").inc()
            logger.info("order_rejected", caller_id=str(caller_id), reason=type(exc).__name__, **exc.context)
            raise
        except Exception:
            await db.rollback()
            cafe_orders_created_total.labels(status="failed").inc()
            logger.error("order_creation_failed", caller_id=str(caller_id), exc_info=True)
            raise
        finally:
            cafe_order_creation_duration_seconds.observe(time.perf_counter() - started)

        cafe_orders_created_total.labels(status="success").inc()
        logger.info(
            "order_created",
            order_id=str(order.id),
            reference=order.reference,
            user_id=str(caller_id),
            lines=len(order.items),
            total=str(order.total),
        )
        return order

    @staticmethod
    async def _place_order(db: AsyncSession, data: OrderCreate, caller_id: uuid.UUID) -> Order:
        user = await AuthService.resolve_user(db, caller_id)

        # Drawn before any product row is locked
        reference = await OrderService.references.generate(db)
        order = Order(
            reference=reference,
            user_id=user.id,
            status=OrderStatus.PENDING,
            total=Decimal("0"),
            items=[],
        )
        total = Decimal("0")

        # Lock in id order so two carts naming the same products cannot deadlock
        locked = {}
        for product_id in sorted({line.product_id for line in data.items}):
            locked[product_id] = await ProductRepository.get_for_update(db, product_id)

        for line in data.items:
            product = locked[line.product_id]
            if not product:
                raise ProductNotFound(line.product_id)

            if product.quantity < line.quantity:
                cafe_stock_rejections_total.inc()
                raise InsufficientStock(product.name, product.quantity, line.quantity)

            # Snapshot before touching the row
            unit_price = product.price
            product.reserve(line.quantity)
            await ProductRepository.save(db, product)

            order.add_item(OrderItem(
                product=product,
                quantity=line.quantity,
                price_at_reservation=unit_price,
            ))
            total += unit_price * line.quantity

        order.total = total

        while True:
            try:
                await OrderRepository.save(db, order)
                return order
            except ReferenceCollision as exc:
                # A concurrent order took the code after it was checked
                cafe_reference_collisions_total.labels(stage="insert").inc()
                logger.warning("order_reference_collision", reference=exc.reference)
                order.reference = await OrderService.references.generate(db)

    @staticmethod
    async def get_order_by_id(db: AsyncSession, order_id: uuid.UUID, caller: CurrentUser) -> Order:
        order = await OrderRepository.get_by_id(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        if not caller.is_admin and order.user_id != caller.id:
            raise AccessDenied("You are not allowed to view this order")
        return order

    @staticmethod
    async def get_all_orders(db: AsyncSession, params: PageParams, newest_first: bool = True) -> PagedResponse[OrderResponse]:
        orders, total = await OrderRepository.find_all(db, params, newest_first=newest_first)
        return _to_page(orders, total, params)

    @staticmethod
    async def get_orders_by_status(db: AsyncSession, status: OrderStatus, params: PageParams) -> PagedResponse[OrderResponse]:
        """Orders in `status`, oldest first so the kitchen works through them in arrival order."""
        orders, total = await OrderRepository.find_by_status(db, status, params)
        return _to_page(orders, total, params)

    @staticmethod
    async def get_orders_by_user(db: AsyncSession, user_id: uuid.UUID, params: PageParams) -> PagedResponse[OrderResponse]:
        orders, total = await OrderRepository.find_by_user(db, user_id, params)
        return _to_page(orders, total, params)

    @staticmethod
    async def get_latest_active_order(db: AsyncSession, user_id: uuid.UUID) -> Optional[Order]:
        return await OrderRepository.find_latest_active(db, user_id)

    @staticmethod
    async def change_status(db: AsyncSession, order_id: uuid.UUID, new_status: OrderStatus) -> Order:
        """Administrative override: any status may be set from any status."""
        order = await OrderRepository.get_by_id(db, order_id)
        if not order:
            raise OrderNotFound(order_id)

        previous = order.status
        order.status = new_status
        await OrderRepository.update(db, order)
        await db.commit()

        cafe_order_status_changes_total.labels(from_status=previous.value, to_status=new_status.value).inc()
        if new_status != previous and new_status not in STANDARD_TRANSITIONS[previous]:
            logger.warning(
                "order_status_forced",
                order_id=str(order.id),
                from_status=previous.value,
                to_status=new_status.value,
            )
        else:
            logger.info(
                "order_status_changed",
                order_id=str(order.id),
                from_status=previous.value,
                to_status=new_status.value,
            )
        return order

    @staticmethod
    async def cancel_order(db: AsyncSession, order_id: uuid.UUID, caller_id: uuid.UUID) -> Order:
        """Owner cancellation, only while the order is still PENDING. Stock is not restored."""
        order = await OrderRepository.get_by_id(db, order_id)
        if not order:
            raise OrderNotFound(order_id)
        if order.user_id != caller_id:
            raise AccessDenied("You are not allowed to cancel this order")
        if order.status != OrderStatus.PENDING:
            raise InvalidState("Only PENDING orders can be cancelled")

        order.status = OrderStatus.CANCELLED
        await OrderRepository.update(db, order)
        await db.commit()

        cafe_order_status_changes_total.labels(
            from_status=OrderStatus.PENDING.value, to_status=OrderStatus.CANCELLED.value
        ).inc()
        logger.info("order_cancelled", order_id=str(order.id), user_id=str(caller_id))
        return order
