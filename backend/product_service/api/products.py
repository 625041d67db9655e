"""
Products API Endpoints
Handles product catalog management, stock deduction and image upload
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from product_service.core.config import get_settings
from product_service.core.exceptions import (
    InsufficientStockError,
    StorageNotConfiguredError,
    StorageUploadError,
)
from product_service.domain.product import ProductCreate, ProductUpdate, StockDeduction
from product_service.repositories.product_repository import ProductRepository
from product_service.services.blob_storage_service import BlobStorageService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_product_repository() -> ProductRepository:
    return ProductRepository()


# One instance per process so the container check runs once
_storage_service = None


def get_storage_service() -> BlobStorageService:
    global _storage_service
    if _storage_service is None:
        _storage_service = BlobStorageService(get_settings())
    return _storage_service


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    repo: ProductRepository = Depends(get_product_repository)
):
    """Create a new product"""
    try:
        created = repo.create(product)
        logger.info(f"Product {created.id} created: {created.name}")

        return {
            "status": "success",
            "data": created.to_dict()
        }

    except Exception as e:
        logger.error(f"Error creating product: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.get("/")
async def get_products(
    search: Optional[str] = Query(None, description="Search by name or description"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    repo: ProductRepository = Depends(get_product_repository)
):
    """
    Get all products with an optional search filter
    """
    try:
        products, total = repo.find_all(search=search, limit=limit, offset=skip)

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": skip,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    repo: ProductRepository = Depends(get_product_repository)
):
    """Get a single product by ID"""
    try:
        product = repo.find_by_id(product_id)

        if not product:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

        return {
            "status": "success",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    changes: ProductUpdate,
    repo: ProductRepository = Depends(get_product_repository)
):
    """Update the provided fields of a product"""
    try:
        product = repo.update(product_id, changes)

        if not product:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

        logger.info(f"Product {product_id} updated")
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    repo: ProductRepository = Depends(get_product_repository)
):
    """Delete a product"""
    try:
        deleted = repo.delete(product_id)
    except Exception as e:
        logger.error(f"Error deleting product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

    logger.info(f"Product {product_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/deduct-stock")
async def deduct_stock(
    product_id: int,
    request: StockDeduction,
    repo: ProductRepository = Depends(get_product_repository)
):
    """
    Deduct stock for a product (called by the order service)

    Fails with 400 when the product has fewer units than requested.
    """
    try:
        product = repo.deduct_stock(product_id, request.quantity_to_deduct)
    except InsufficientStockError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error deducting stock for product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error deducting stock: {str(e)}")

    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

    logger.info(
        f"Deducted {request.quantity_to_deduct} from product {product_id}, "
        f"{product.stock_quantity} left"
    )
    return {
        "status": "success",
        "data": product.to_dict()
    }


@router.post("/{product_id}/upload-image")
async def upload_product_image(
    product_id: int,
    file: UploadFile = File(...),
    repo: ProductRepository = Depends(get_product_repository),
    storage: BlobStorageService = Depends(get_storage_service)
):
    """
    Upload a product image to Azure Blob Storage

    Stores a time-limited SAS URL as the product's image_url.
    """
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(
            status_code=400,
            detail=f"Only image files are allowed (got {file.content_type or 'unknown'})"
        )

    if not repo.find_by_id(product_id):
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

    data = await file.read()
    max_bytes = storage.settings.MAX_IMAGE_SIZE_MB * 1024 * 1024
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Image exceeds {storage.settings.MAX_IMAGE_SIZE_MB} MB limit"
        )

    try:
        image_url = storage.upload_product_image(
            product_id,
            data,
            filename=file.filename,
            content_type=file.content_type
        )
    except StorageNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except StorageUploadError as e:
        raise HTTPException(status_code=500, detail=str(e))

    product = repo.set_image_url(product_id, image_url)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

    return {
        "status": "success",
        "data": product.to_dict()
    }
