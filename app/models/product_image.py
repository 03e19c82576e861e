from sqlmodel import SQLModel, Field
from typing import Optional

MAXIMUM_IMAGES_OF_PRODUCT = 5


class ProductImageBase(SQLModel):
    image_url: str = Field(max_length=300)


class ProductImage(ProductImageBase, table=True):
    __tablename__ = "product_images"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)


class ProductImageCreate(ProductImageBase):
    pass
