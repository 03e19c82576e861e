# Export all DAO classes
from .base_dao import BaseDAO
from .category_dao import category_dao
from .product_dao import product_dao
from .product_image_dao import product_image_dao

__all__ = [
    "BaseDAO",
    "category_dao",
    "product_dao",
    "product_image_dao",
]
