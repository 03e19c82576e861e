from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import PlainTextResponse
from app.core.config import settings
from app.core.errors import ErrorCode, ProductError
from app.entities.page import PageRequest
from app.models.product_image import ProductImageCreate, MAXIMUM_IMAGES_OF_PRODUCT
from app.schemas.product_schemas import (
    ProductRequest,
    ProductResponse,
    ProductListResponse,
    ProductImageResponse,
)
from app.services.image_storage import (
    ImageStorage,
    InvalidImageFileError,
    MAX_IMAGE_SIZE,
    get_image_storage,
    is_image_content_type,
)
from app.services.product_service import get_product_service
from app.services.protocols import ProductServiceProtocol
import structlog

logger = structlog.get_logger()

router = APIRouter(prefix="/products", tags=["Products"])

# Largest value a database integer column or OFFSET/LIMIT accepts
MAX_SQL_INT = 2**63 - 1


def declared_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    # Spooled file without a recorded size, measure it
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    return size


def check_upload(file: UploadFile, product_id: int) -> None:
    """Raise the upload policy error for a non-empty file that cannot be stored"""
    size = declared_size(file)
    if size > MAX_IMAGE_SIZE:
        logger.warning("Upload rejected, file too large", product_id=product_id, size=size)
        raise ProductError(ErrorCode.PAYLOAD_TOO_LARGE, "File is too large! Maximum size is 10MB.")

    if not is_image_content_type(file.content_type):
        logger.warning(
            "Upload rejected, not an image",
            product_id=product_id,
            content_type=file.content_type,
        )
        raise ProductError(ErrorCode.UNSUPPORTED_MEDIA_TYPE, "File must be an image.")


@router.get("", response_model=ProductListResponse)
async def get_products(
    page: int = Query(..., ge=0, le=MAX_SQL_INT),
    limit: int = Query(..., ge=1, le=MAX_SQL_INT),
    product_service: ProductServiceProtocol = Depends(get_product_service),
):
    """List products, newest first"""
    if settings.max_page_limit is not None and limit > settings.max_page_limit:
        raise ProductError.validation(
            f"limit must be <= {settings.max_page_limit}",
            [f"limit: must be <= {settings.max_page_limit}"],
        )
    if page * limit > MAX_SQL_INT:
        raise ProductError.validation("page is out of range", ["page: out of range for this limit"])

    page_request = PageRequest(page=page, size=limit, sort_by="created_at", descending=True)
    try:
        product_page = await product_service.list_page(page_request)
    except ProductError:
        raise
    except Exception as e:
        logger.error("Failed to list products", page=page, limit=limit, error=str(e))
        raise ProductError.internal(str(e))

    return ProductListResponse(
        products=product_page.content,
        totalPages=product_page.total_pages,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    product_service: ProductServiceProtocol = Depends(get_product_service),
):
    try:
        product = await product_service.get_by_id(product_id)
        return ProductResponse.model_validate(product)
    except ProductError:
        raise
    except Exception as e:
        logger.error("Failed to get product", product_id=product_id, error=str(e))
        raise ProductError.internal(str(e))


@router.post("", response_model=ProductResponse)
async def create_product(
    product: ProductRequest,
    product_service: ProductServiceProtocol = Depends(get_product_service),
):
    try:
        created = await product_service.create(product)
        return ProductResponse.model_validate(created)
    except ProductError:
        raise
    except Exception as e:
        logger.error("Failed to create product", name=product.name, error=str(e))
        raise ProductError.internal(str(e))


@router.post("/uploads/{product_id}", response_model=List[ProductImageResponse])
async def upload_images(
    product_id: int,
    files: Optional[List[UploadFile]] = File(None),
    product_service: ProductServiceProtocol = Depends(get_product_service),
    image_storage: ImageStorage = Depends(get_image_storage),
):
    """
    Validate, store and register images for a product.

    Every file is checked for size and type, and the product's image limit is
    checked, before the first file is written. Files are then stored in
    submission order.
    """
    try:
        existing_product = await product_service.get_by_id(product_id)
        files = files or []

        if len(files) > MAXIMUM_IMAGES_OF_PRODUCT:
            raise ProductError.validation(
                f"You can upload maximum {MAXIMUM_IMAGES_OF_PRODUCT} images"
            )

        # Zero-byte parts are skipped, not counted
        pending = [f for f in files if declared_size(f) > 0]
        for file in pending:
            check_upload(file, product_id)

        existing = await product_service.count_images(existing_product.id)
        if existing + len(pending) > MAXIMUM_IMAGES_OF_PRODUCT:
            raise ProductError.validation(
                f"Number of images must be <= {MAXIMUM_IMAGES_OF_PRODUCT}"
            )

        product_images = []
        for file in pending:
            filename = await image_storage.store(file)
            try:
                product_image = await product_service.attach_image(
                    existing_product.id,
                    ProductImageCreate(image_url=filename),
                )
            except Exception:
                await image_storage.delete(filename)
                raise

            product_images.append(ProductImageResponse.model_validate(product_image))

        logger.info("Images uploaded", product_id=product_id, count=len(product_images))
        return product_images

    except ProductError:
        raise
    except InvalidImageFileError as e:
        raise ProductError.validation(str(e))
    except OSError as e:
        # Filesystem errors carry server paths, keep them out of the response
        logger.error("Failed to write uploaded image", product_id=product_id, error=str(e))
        raise ProductError.internal("Could not store uploaded image")
    except Exception as e:
        logger.error("Failed to upload images", product_id=product_id, error=str(e))
        raise ProductError.internal(str(e))


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product: ProductRequest,
    product_service: ProductServiceProtocol = Depends(get_product_service),
):
    try:
        updated = await product_service.update(product_id, product)
        return ProductResponse.model_validate(updated)
    except ProductError:
        raise
    except Exception as e:
        logger.error("Failed to update product", product_id=product_id, error=str(e))
        raise ProductError.internal(str(e))


@router.delete("/{product_id}", response_class=PlainTextResponse)
async def delete_product(
    product_id: int,
    product_service: ProductServiceProtocol = Depends(get_product_service),
):
    try:
        await product_service.delete(product_id)
        return PlainTextResponse(f"Product with id = {product_id} deleted successfully")
    except ProductError:
        raise
    except Exception as e:
        logger.error("Failed to delete product", product_id=product_id, error=str(e))
        raise ProductError.internal(str(e))
