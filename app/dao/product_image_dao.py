from sqlmodel import select
from sqlalchemy import func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.models.product_image import ProductImage
import structlog

logger = structlog.get_logger()


class ProductImageDAO(BaseDAO[ProductImage]):
    def __init__(self):
        super().__init__(ProductImage)

    async def count_by_product(self, db: AsyncSession, product_id: int) -> int:
        try:
            result = await db.execute(
                select(func.count())
                .select_from(ProductImage)
                .where(ProductImage.product_id == product_id)
            )
            return result.scalar_one()
        except Exception as e:
            logger.error("Error counting product images", product_id=product_id, error=str(e))
            raise

    async def delete_by_product(self, db: AsyncSession, product_id: int) -> None:
        """Remove image rows without committing; the caller owns the transaction"""
        try:
            await db.execute(delete(ProductImage).where(ProductImage.product_id == product_id))
        except Exception as e:
            logger.error("Error deleting product images", product_id=product_id, error=str(e))
            raise


product_image_dao = ProductImageDAO()
