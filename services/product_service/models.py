import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, Integer, Numeric, String, Uuid

from shared.config.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(str, enum.Enum):
    ENTREE = "ENTREE"
    PLAT = "PLAT"
    DESSERT = "DESSERT"
    BOISSON = "BOISSON"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    # Kept equal to quantity > 0 whenever an order decrements stock
    available = Column(Boolean, nullable=False, default=True)
    category = Column(Enum(Category, name="product_category"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def reserve(self, quantity: int) -> None:
        """Take `quantity` units out of stock. The caller has already checked availability."""
        self.quantity -= quantity
        if self.quantity <= 0:
            self.available = False
