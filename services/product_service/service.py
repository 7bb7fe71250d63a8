import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import ProductNotFound
from shared.pagination import PagedResponse, PageParams
from .models import Category, Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductResponse, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
            available=data.quantity > 0,
            category=data.category,
        )
        return await ProductRepository.create_product(db, product)

    @staticmethod
    async def update_product(db: AsyncSession, product_id: uuid.UUID, data: ProductUpdate) -> Product:
        """Edit catalog details. Orders already placed keep the price they were taken at."""
        product = await ProductService.get_product_by_id(db, product_id)
        previous_price = product.price

        product.name = data.name
        product.description = data.description
        product.price = data.price
        product.category = data.category
        product = await ProductRepository.update_product(db, product)

        logger.info(
            "product_updated",
            product_id=str(product.id),
            previous_price=str(previous_price),
            price=str(product.price),
        )
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession,
        params: PageParams,
        category: Optional[Category] = None,
        available: Optional[bool] = None,
    ) -> PagedResponse[ProductResponse]:
        products, total = await ProductRepository.list_products(db, params, category, available)
        return PagedResponse[ProductResponse].of(
            [ProductResponse.model_validate(p) for p in products], total, params
        )

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: uuid.UUID) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product
