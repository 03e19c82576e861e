from typing import List
from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.entities.page import PageRequest
from app.models.product import Product
import structlog

logger = structlog.get_logger()


class ProductDAO(BaseDAO[Product]):
    def __init__(self):
        super().__init__(Product)

    async def get_page(self, db: AsyncSession, page_request: PageRequest) -> List[Product]:
        try:
            sort_column = getattr(Product, page_request.sort_by)
            if page_request.descending:
                order = (sort_column.desc(), Product.id.desc())
            else:
                order = (sort_column.asc(), Product.id.asc())

            result = await db.execute(
                select(Product)
                .order_by(*order)
                .offset(page_request.offset)
                .limit(page_request.size)
            )
            return result.scalars().all()
        except Exception as e:
            logger.error(
                "Error getting product page",
                page=page_request.page,
                size=page_request.size,
                error=str(e),
            )
            raise

    async def exists_by_name(self, db: AsyncSession, name: str) -> bool:
        try:
            result = await db.execute(
                select(func.count()).select_from(Product).where(Product.name == name)
            )
            return result.scalar_one() > 0
        except Exception as e:
            logger.error("Error checking product name", name=name, error=str(e))
            raise


product_dao = ProductDAO()
