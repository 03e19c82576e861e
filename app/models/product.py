from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProductBase(SQLModel):
    name: str = Field(index=True, max_length=350)
    price: float = Field(default=0)
    thumbnail: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = None
    category_id: int = Field(foreign_key="categories.id")


class Product(ProductBase, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: Optional[datetime] = None
