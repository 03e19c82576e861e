from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ProductRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=200)
    price: float = Field(..., ge=0, le=10_000_000)
    thumbnail: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = None
    category_id: int = Field(..., ge=1)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: float
    thumbnail: Optional[str]
    description: Optional[str]
    category_id: int
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    totalPages: int


class ProductImageResponse(BaseModel):
    id: int
    product_id: int
    image_url: str

    class Config:
        from_attributes = True
