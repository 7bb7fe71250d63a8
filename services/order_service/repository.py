import uuid
from typing import Optional, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import ReferenceCollision
from shared.pagination import PageParams
from .models import ACTIVE_STATUSES, Order, OrderStatus


class OrderRepository:

    @staticmethod
    async def exists_by_reference(db: AsyncSession, reference: str) -> bool:
        return bool(await db.scalar(select(exists().where(Order.reference == reference))))

    @staticmethod
    async def save(db: AsyncSession, order: Order) -> Order:
        """
        Stage the order and its items in the current transaction.

        The insert runs inside a savepoint so that a reference taken by a
        concurrent order only undoes this insert, not the stock already
        reserved by the caller. That case is reported as ReferenceCollision.
        """
        try:
            async with db.begin_nested():
                db.add(order)
                await db.flush()
        except IntegrityError as exc:
            if "reference" in str(exc.orig).lower():
                raise ReferenceCollision(order.reference) from exc
            raise
        return order

    @staticmethod
    async def update(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_by_id(db: AsyncSession, order_id: uuid.UUID) -> Optional[Order]:
        return await db.get(Order, order_id)

    @staticmethod
    async def find_all(db: AsyncSession, params: PageParams, newest_first: bool = True) -> tuple[Sequence[Order], int]:
        order_by = Order.created_at.desc() if newest_first else Order.created_at.asc()
        return await OrderRepository._page(db, select(Order), order_by, params)

    @staticmethod
    async def find_by_status(db: AsyncSession, status: OrderStatus, params: PageParams) -> tuple[Sequence[Order], int]:
        query = select(Order).where(Order.status == status)
        return await OrderRepository._page(db, query, Order.created_at.asc(), params)

    @staticmethod
    async def find_by_user(db: AsyncSession, user_id: uuid.UUID, params: PageParams) -> tuple[Sequence[Order], int]:
        query = select(Order).where(Order.user_id == user_id)
        return await OrderRepository._page(db, query, Order.created_at.desc(), params)

    @staticmethod
    async def find_latest_active(db: AsyncSession, user_id: uuid.UUID) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id, Order.status.in_(ACTIVE_STATUSES))
            .order_by(Order.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def _page(db: AsyncSession, query, order_by, params: PageParams) -> tuple[Sequence[Order], int]:
        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(query.order_by(order_by).offset(params.offset).limit(params.size))
        return result.scalars().all(), total or 0
