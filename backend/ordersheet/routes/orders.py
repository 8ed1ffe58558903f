"""
Order Sheet Backend: Orders Route Handlers
===========================================

What:  The five REST operations over the order table.
How:   Extracts the path id and JSON body, delegates to OrderService, returns JSON.
Who:   Called by the local front-end.

Response shapes:
    GET    /orders         → array of positional rows (header excluded)
    GET    /orders/{id}    → one positional row
    POST   /orders         → 201, created order object (with generated id)
    PUT    /orders/{id}    → merged order object
    DELETE /orders/{id}    → {"success": true}
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from ordersheet.dependencies import get_order_service
from ordersheet.schemas.order import DeleteResponse, ErrorResponse, OrderPayload, OrderRow
from ordersheet.services.order_service import OrderService

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(tags=["Orders"])

_NOT_FOUND = {"description": "Order not found (plain text)", "content": {"text/plain": {}}}


def _sent_fields(payload: Optional[OrderPayload]) -> Dict[str, Any]:
    # No body at all behaves like an empty object
    if payload is None:
        return {}
    return payload.model_dump(exclude_unset=True)


@router.get(
    "/orders",
    response_model=List[OrderRow],
    responses={500: {"description": "Workbook unreadable", "model": ErrorResponse}},
    summary="List all orders",
    description="Returns every data row of the workbook, in file order, as positional arrays.",
)
async def list_orders(
    service: OrderService = Depends(get_order_service),
) -> List[OrderRow]:
    return await service.list_orders()


@router.get(
    "/orders/{order_id}",
    response_model=OrderRow,
    responses={
        404: _NOT_FOUND,
        500: {"description": "Workbook unreadable", "model": ErrorResponse},
    },
    summary="Get a single order by ID",
)
async def get_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
) -> OrderRow:
    """
    Returns the first row whose id cell equals `order_id`.

    The id is compared as a string; rows are not reshaped into objects.
    """
    return await service.get_order(order_id)


@router.post(
    "/orders",
    status_code=status.HTTP_201_CREATED,
    response_model=Dict[str, Any],
    responses={
        400: {"description": "Unparseable body or order could not be saved", "model": ErrorResponse},
    },
    summary="Create an order",
    description=(
        "Generates an id from the current epoch milliseconds, overlays the request "
        "fields on it and appends the order as a new row. An empty body creates "
        "an order holding only the id and creation date."
    ),
)
async def create_order(
    payload: Optional[OrderPayload] = None,
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    return await service.create_order(_sent_fields(payload))


@router.put(
    "/orders/{order_id}",
    response_model=Dict[str, Any],
    responses={
        404: _NOT_FOUND,
        400: {"description": "Unparseable body or order could not be saved", "model": ErrorResponse},
    },
    summary="Update an order by ID",
)
async def update_order(
    order_id: str,
    payload: Optional[OrderPayload] = None,
    service: OrderService = Depends(get_order_service),
) -> Dict[str, Any]:
    """
    Shallow-merges the sent fields over the stored order.

    Fields absent from the body keep their stored values; an empty body
    rewrites the order unchanged.
    """
    return await service.update_order(order_id, _sent_fields(payload))


@router.delete(
    "/orders/{order_id}",
    response_model=DeleteResponse,
    responses={
        404: _NOT_FOUND,
        500: {"description": "Workbook unreadable or unwritable", "model": ErrorResponse},
    },
    summary="Delete an order by ID",
)
async def delete_order(
    order_id: str,
    service: OrderService = Depends(get_order_service),
) -> DeleteResponse:
    result = await service.delete_order(order_id)
    return DeleteResponse(**result)
