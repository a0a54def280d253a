"""
Endpoints de API para pedidos.

Este módulo expone la consolidación de pedidos (crear o fusionar por
fecha y cliente), el reemplazo total, el borrado, las vistas de lectura
y la importación masiva de filas planas.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from smb_orders.api.v1.schemas.order_schemas import (
    ConsolidationResponse,
    CreateOrderRequest,
    DeletedOrderResponse,
    ImportResponse,
    ImportRowRequest,
    OrderResponse,
    ReplaceOrderRequest,
    UpdatedOrderResponse,
)
from smb_orders.core.config import get_settings
from smb_orders.services.orders import BatchImportOrchestrator, OrderConsolidationOrchestrator

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter()


# === DEPENDENCIAS ===


def get_orders_service(request: Request) -> OrderConsolidationOrchestrator:
    """Orquestador de pedidos creado en el lifespan."""
    return request.app.state.orders_service


def get_import_service(request: Request) -> BatchImportOrchestrator:
    """Importador masivo creado en el lifespan."""
    return request.app.state.import_service


# === LECTURAS ===


@router.get(
    "",
    response_model=List[OrderResponse],
    response_model_exclude_none=True,
    summary="Pedidos recientes",
    description="Lista los pedidos más recientes (id descendente), sin líneas",
)
async def list_recent_orders(
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Cantidad máxima de pedidos"),
    service: OrderConsolidationOrchestrator = Depends(get_orders_service),
):
    orders = await service.list_recent_orders(limit)
    return [OrderResponse.from_domain(order, with_items=False) for order in orders]


@router.get("/months", response_model=List[str], summary="Meses con pedidos")
async def list_months(service: OrderConsolidationOrchestrator = Depends(get_orders_service)):
    """Meses ``YYYY-MM`` que tienen pedidos, del más reciente al más antiguo."""
    return await service.list_months()


@router.get("/months/{month}/days", response_model=List[str], summary="Días con pedidos en un mes")
async def list_days(month: str, service: OrderConsolidationOrchestrator = Depends(get_orders_service)):
    """Días ``YYYY-MM-DD`` del mes que tienen pedidos, del más reciente al más antiguo."""
    return await service.list_days(month)


@router.get("/by-date/{order_date}", response_model=List[OrderResponse], summary="Pedidos de un día")
async def list_orders_by_date(order_date: str, service: OrderConsolidationOrchestrator = Depends(get_orders_service)):
    """
    Todos los pedidos de un día con nombre de cliente y líneas.

    Args:
        order_date: Día en formato YYYY-MM-DD

    Returns:
        List[OrderResponse]: Pedidos ordenados por id ascendente
    """
    orders = await service.list_orders_by_date(order_date)
    return [OrderResponse.from_domain(order) for order in orders]


# === MUTACIONES ===


@router.post(
    "",
    response_model=ConsolidationResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Crear o consolidar pedido",
    description="Crea el pedido de (fecha, cliente) o fusiona las líneas en el pedido existente",
)
async def create_or_merge_order(
    body: CreateOrderRequest,
    service: OrderConsolidationOrchestrator = Depends(get_orders_service),
):
    """
    Crea o consolida un pedido.

    Args:
        body: Fecha, cliente, líneas y opcionalmente costo de envío y notas

    Returns:
        ConsolidationResponse: Pedido resultante con sus agregados
    """
    result = await service.create_or_merge(body.to_payload())
    return ConsolidationResponse.from_result(result)


@router.post(
    "/import",
    response_model=ImportResponse,
    summary="Importación masiva",
    description="Agrupa filas por (fecha, cliente) y consolida cada grupo en su pedido",
)
async def import_orders(
    rows: List[ImportRowRequest],
    service: BatchImportOrchestrator = Depends(get_import_service),
):
    """
    Importa filas planas de pedidos.

    Un grupo que falla se reporta en ``errors`` y no detiene el resto.

    Returns:
        ImportResponse: Contadores de la importación
    """
    result = await service.import_rows([row.to_row() for row in rows])
    return ImportResponse.from_result(result)


@router.get("/{order_id}", response_model=OrderResponse, summary="Detalle de pedido")
async def get_order(order_id: int, service: OrderConsolidationOrchestrator = Depends(get_orders_service)):
    """Pedido con datos de contacto del cliente y sus líneas."""
    order = await service.get_order(order_id)
    return OrderResponse.from_domain(order)


@router.put(
    "/{order_id}",
    response_model=UpdatedOrderResponse,
    summary="Reemplazar pedido",
    description="Sobrescribe cabecera y líneas del pedido tal como se envían",
)
async def replace_order(
    order_id: int,
    body: ReplaceOrderRequest,
    service: OrderConsolidationOrchestrator = Depends(get_orders_service),
):
    """
    Reemplazo total de un pedido.

    Las líneas se guardan sin fusionar; el costo de envío omitido vale 0
    y las notas omitidas quedan vacías.
    """
    order = await service.replace_order(order_id, body.to_payload())
    return UpdatedOrderResponse(updated=True, order=OrderResponse.from_domain(order))


@router.delete("/{order_id}", response_model=DeletedOrderResponse, summary="Eliminar pedido")
async def delete_order(order_id: int, service: OrderConsolidationOrchestrator = Depends(get_orders_service)):
    """Elimina el pedido y todas sus líneas."""
    await service.delete_order(order_id)
    return DeletedOrderResponse(deleted=True, id=order_id)
