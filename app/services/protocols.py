"""Interfaces the product controller depends on."""

from typing import Protocol

from app.entities.page import Page, PageRequest
from app.models.product import Product
from app.models.product_image import ProductImage, ProductImageCreate
from app.schemas.product_schemas import ProductRequest, ProductResponse


class ProductServiceProtocol(Protocol):
    """Product operations used by the HTTP layer.

    Failures are raised as ``ProductError`` with a typed ``ErrorCode``.
    """

    async def list_page(self, page_request: PageRequest) -> Page[ProductResponse]:
        ...

    async def get_by_id(self, product_id: int) -> Product:
        ...

    async def create(self, payload: ProductRequest) -> Product:
        ...

    async def update(self, product_id: int, payload: ProductRequest) -> Product:
        ...

    async def delete(self, product_id: int) -> None:
        ...

    async def attach_image(self, product_id: int, image: ProductImageCreate) -> ProductImage:
        ...

    async def count_images(self, product_id: int) -> int:
        ...

    async def exists_by_name(self, name: str) -> bool:
        ...
