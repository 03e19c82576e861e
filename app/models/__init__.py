# Import all models for easy access
from .category import Category
from .product import Product, ProductBase
from .product_image import ProductImage, ProductImageCreate, MAXIMUM_IMAGES_OF_PRODUCT

__all__ = [
    "Category",
    "Product", "ProductBase",
    "ProductImage", "ProductImageCreate", "MAXIMUM_IMAGES_OF_PRODUCT",
]
