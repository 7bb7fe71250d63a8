import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .models import Category


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=1000)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=0)
    category: Category


class ProductUpdate(BaseModel):
    """Catalog details an admin may edit. Stock only changes through orders."""
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=1000)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: Category


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str
    price: Decimal
    quantity: int
    available: bool
    category: Category
