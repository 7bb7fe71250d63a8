import uuid
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.pagination import PageParams
from .models import Category, Product


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession,
        params: PageParams,
        category: Optional[Category] = None,
        available: Optional[bool] = None,
    ) -> tuple[Sequence[Product], int]:
        query = select(Product)
        if category is not None:
            query = query.where(Product.category == category)
        if available is not None:
            query = query.where(Product.available == available)

        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(
            query.order_by(Product.name).offset(params.offset).limit(params.size)
        )
        return result.scalars().all(), total or 0

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: uuid.UUID) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def get_for_update(db: AsyncSession, product_id: uuid.UUID) -> Optional[Product]:
        """Load a product and lock its row until the current transaction ends."""
        result = await db.execute(
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def save(db: AsyncSession, product: Product) -> Product:
        """Stage the product's changes in the current transaction. The caller commits."""
        db.add(product)
        await db.flush()
        return product
