"""
Orders API Endpoints
Handles order placement, queries and status changes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from order_service.connectors.product_client import ProductServiceClient
from order_service.core.config import get_settings
from order_service.core.exceptions import (
    InsufficientStockError,
    OrderFulfillmentError,
    OrderValidationError,
    ProductNotFoundError,
    ProductServiceError,
    ProductServiceUnavailableError,
)
from order_service.domain.order import OrderCreate, OrderStatus, OrderStatusUpdate
from order_service.repositories.order_repository import OrderRepository
from order_service.services.order_placement_service import OrderPlacementService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_order_repository() -> OrderRepository:
    return OrderRepository()


def get_product_client() -> ProductServiceClient:
    settings = get_settings()
    return ProductServiceClient(settings.PRODUCT_SERVICE_URL, timeout=settings.PRODUCT_SERVICE_TIMEOUT)


def get_placement_service(
    repo: OrderRepository = Depends(get_order_repository),
    product_client: ProductServiceClient = Depends(get_product_client)
) -> OrderPlacementService:
    return OrderPlacementService(repo, product_client)


def _product_error_status(error: ProductServiceError, after_storage: bool) -> int:
    """HTTP status for a Product Service failure"""
    if isinstance(error, ProductNotFoundError):
        return 404
    if isinstance(error, InsufficientStockError):
        # Stock ran out between validation and deduction
        return 409 if after_storage else 400
    if isinstance(error, ProductServiceUnavailableError):
        return 503
    return 502


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_order(
    order: OrderCreate,
    service: OrderPlacementService = Depends(get_placement_service)
):
    """
    Place a new order

    Validates products and stock with the Product Service, stores the order
    and deducts stock.
    """
    try:
        placed = await service.place_order(order)

    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderFulfillmentError as e:
        raise HTTPException(
            status_code=_product_error_status(e.cause, after_storage=True),
            detail=f"Order {e.order_id} failed: {e.cause}"
        )
    except ProductServiceError as e:
        raise HTTPException(
            status_code=_product_error_status(e, after_storage=False),
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating order: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")

    return {
        "status": "success",
        "data": placed.to_dict()
    }


@router.get("/")
async def get_orders(
    user_id: Optional[int] = Query(None, ge=1, description="Filter by user"),
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by order status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    repo: OrderRepository = Depends(get_order_repository)
):
    """
    Get all orders with optional filters, newest first

    Items are included with each order
    """
    try:
        orders, total = repo.find_all(
            user_id=user_id,
            status=order_status.value if order_status else None,
            limit=limit,
            offset=skip
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": skip,
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/stats")
async def get_order_stats(repo: OrderRepository = Depends(get_order_repository)):
    """
    Get order statistics

    Returns:
    - Total orders
    - Revenue (failed and cancelled orders excluded)
    - Orders by status
    """
    try:
        return {
            "status": "success",
            "data": repo.get_stats()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    repo: OrderRepository = Depends(get_order_repository)
):
    """Get a single order with its items"""
    try:
        order = repo.find_by_id(order_id)

        if not order:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/{order_id}/items")
async def get_order_items(
    order_id: int,
    repo: OrderRepository = Depends(get_order_repository)
):
    """Get the line items of an order"""
    try:
        items = repo.find_items(order_id)

        if items is None:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

        return {
            "status": "success",
            "count": len(items),
            "data": [item.to_dict() for item in items]
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order items: {str(e)}")


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: int,
    request: OrderStatusUpdate,
    repo: OrderRepository = Depends(get_order_repository)
):
    """Change the status of an order"""
    try:
        order = repo.update_status(order_id, request.status)

        if not order:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

        logger.info(f"Order {order_id} status set to {request.status.value}")
        return {
            "status": "success",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: int,
    repo: OrderRepository = Depends(get_order_repository)
):
    """Delete an order and its items"""
    try:
        deleted = repo.delete(order_id)
    except Exception as e:
        logger.error(f"Error deleting order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error deleting order: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

    logger.info(f"Order {order_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
