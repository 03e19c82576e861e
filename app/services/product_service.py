from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.core.database import async_session_maker
from app.core.errors import ProductError
from app.dao.category_dao import category_dao
from app.dao.product_dao import product_dao
from app.dao.product_image_dao import product_image_dao
from app.entities.page import Page, PageRequest
from app.models.product import Product, utc_now
from app.models.product_image import ProductImage, ProductImageCreate, MAXIMUM_IMAGES_OF_PRODUCT
from app.schemas.product_schemas import ProductRequest, ProductResponse
import structlog

logger = structlog.get_logger()


class ProductService:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.product_dao = product_dao
        self.product_image_dao = product_image_dao
        self.category_dao = category_dao

    async def list_page(self, page_request: PageRequest) -> Page[ProductResponse]:
        async with self.session_factory() as db:
            products = await self.product_dao.get_page(db, page_request)
            total = await self.product_dao.count(db)

        logger.info(
            "Retrieved products",
            page=page_request.page,
            size=page_request.size,
            count=len(products),
            total=total,
        )
        return Page(
            content=[ProductResponse.model_validate(p) for p in products],
            page=page_request.page,
            size=page_request.size,
            total_elements=total,
        )

    async def get_by_id(self, product_id: int) -> Product:
        async with self.session_factory() as db:
            return await self._get_product(db, product_id)

    async def create(self, payload: ProductRequest) -> Product:
        async with self.session_factory() as db:
            await self._ensure_category(db, payload.category_id)

            if await self.product_dao.exists_by_name(db, payload.name):
                logger.warning("Duplicate product name", name=payload.name)
                raise ProductError.conflict(f"Product with name '{payload.name}' already exists")

            product_data = payload.model_dump()
            product_data["created_at"] = utc_now()
            product = await self.product_dao.create(db, obj_in=product_data)

        logger.info("Product created successfully", product_id=product.id)
        return product

    async def update(self, product_id: int, payload: ProductRequest) -> Product:
        async with self.session_factory() as db:
            product = await self._get_product(db, product_id)
            await self._ensure_category(db, payload.category_id)

            if payload.name != product.name and await self.product_dao.exists_by_name(db, payload.name):
                logger.warning("Duplicate product name", name=payload.name, product_id=product_id)
                raise ProductError.conflict(f"Product with name '{payload.name}' already exists")

            update_data = payload.model_dump()
            update_data["updated_at"] = utc_now()
            product = await self.product_dao.update(db, db_obj=product, obj_in=update_data)

        logger.info("Product updated successfully", product_id=product_id)
        return product

    async def delete(self, product_id: int) -> None:
        async with self.session_factory() as db:
            await self._get_product(db, product_id)
            await self.product_image_dao.delete_by_product(db, product_id)
            await self.product_dao.delete(db, id=product_id)

        logger.info("Product deleted successfully", product_id=product_id)

    async def attach_image(self, product_id: int, image: ProductImageCreate) -> ProductImage:
        async with self.session_factory() as db:
            await self._get_product(db, product_id)

            existing = await self.product_image_dao.count_by_product(db, product_id)
            if existing >= MAXIMUM_IMAGES_OF_PRODUCT:
                logger.warning("Product image limit reached", product_id=product_id, existing=existing)
                raise ProductError.validation(
                    f"Number of images must be <= {MAXIMUM_IMAGES_OF_PRODUCT}"
                )

            image_data = image.model_dump()
            image_data["product_id"] = product_id
            product_image = await self.product_image_dao.create(db, obj_in=image_data)

        logger.info(
            "Product image attached",
            product_id=product_id,
            image_id=product_image.id,
            image_url=product_image.image_url,
        )
        return product_image

    async def count_images(self, product_id: int) -> int:
        async with self.session_factory() as db:
            return await self.product_image_dao.count_by_product(db, product_id)

    async def exists_by_name(self, name: str) -> bool:
        async with self.session_factory() as db:
            return await self.product_dao.exists_by_name(db, name)

    async def _get_product(self, db: AsyncSession, product_id: int) -> Product:
        product = await self.product_dao.get_by_id(db, product_id)
        if not product:
            logger.warning("Product not found", product_id=product_id)
            raise ProductError.not_found(f"Cannot find product with id = {product_id}")
        return product

    async def _ensure_category(self, db: AsyncSession, category_id: int) -> None:
        category = await self.category_dao.get_by_id(db, category_id)
        if not category:
            logger.warning("Category not found", category_id=category_id)
            raise ProductError.not_found(f"Cannot find category with id = {category_id}")


product_service = ProductService(async_session_maker)


def get_product_service() -> ProductService:
    """FastAPI dependency for the product service"""
    return product_service
