"""
Modelos Pydantic para la API de pedidos.

Los nombres en el wire son camelCase; internamente se usan nombres snake_case
con alias. Los campos de request son opcionales a propósito: la validación de
negocio (campos requeridos, montos negativos) la hace el OrderValidator.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from smb_orders.domain.models import OrderDomain, OrderItemDomain
from smb_orders.services.orders.commands import ConsolidationResult, ImportResult

# Valores de planilla: números o texto tal como vienen de la hoja
SheetValue = Optional[Union[Decimal, str]]


class WireModel(BaseModel):
    """Base con alias camelCase y población por nombre de campo."""

    model_config = ConfigDict(populate_by_name=True)


# === REQUESTS ===


class OrderLineRequest(WireModel):
    """Línea de producto enviada por el cliente."""

    product_id: Optional[int] = Field(None, alias="productId", description="ID del producto")
    qty: Optional[Decimal] = Field(None, description="Cantidad a agregar")
    price: Optional[Decimal] = Field(None, description="Precio unitario")


class CreateOrderRequest(WireModel):
    """Request para crear o consolidar un pedido de (fecha, cliente)."""

    order_date: Optional[date] = Field(None, alias="date", description="Día del pedido (YYYY-MM-DD)")
    customer_id: Optional[int] = Field(None, alias="customerId", description="ID del cliente")
    items: Optional[List[OrderLineRequest]] = Field(None, description="Líneas a aplicar (no vacío)")
    delivery_fee: Optional[Decimal] = Field(None, alias="deliveryFee", description="Costo de envío")
    notes: Optional[str] = Field(None, description="Notas libres")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class ReplaceOrderRequest(CreateOrderRequest):
    """Request de reemplazo total; items vacío deja el pedido sin líneas."""


class ImportRowRequest(WireModel):
    """Fila plana de importación masiva."""

    date: SheetValue = Field(None, description="Fecha; se usan los primeros 10 caracteres")
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    customer_address: Optional[str] = Field(None, alias="customerAddress")
    product_name: Optional[str] = Field(None, alias="productName")
    qty: SheetValue = None
    price: SheetValue = None
    delivery_fee: SheetValue = Field(None, alias="deliveryFee")
    notes: Optional[str] = None

    @field_validator("customer_name", "customer_phone", "customer_address", "product_name", "notes", mode="before")
    @classmethod
    def coerce_sheet_text(cls, v):
        """Las celdas numéricas (teléfonos, códigos de producto) llegan como texto."""
        if isinstance(v, bool) or v is None or isinstance(v, str):
            return v
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v

    def to_row(self) -> dict:
        return self.model_dump(by_alias=True)


# === RESPONSES ===


class OrderItemResponse(WireModel):
    id: Optional[int] = None
    order_id: Optional[int] = Field(None, alias="orderId")
    product_id: int = Field(..., alias="productId")
    product_name: Optional[str] = Field(None, alias="productName")
    qty: float
    price: float

    @classmethod
    def from_domain(cls, item: OrderItemDomain) -> "OrderItemResponse":
        return cls(
            id=item.id,
            order_id=item.order_id,
            product_id=item.product_id,
            product_name=item.product_name,
            qty=float(item.qty),
            price=float(item.price.amount),
        )


class OrderResponse(WireModel):
    """Pedido con agregados; ``items`` solo se incluye en vistas de detalle."""

    id: int
    order_date: date = Field(..., alias="date")
    customer_id: int = Field(..., alias="customerId")
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    customer_address: Optional[str] = Field(None, alias="customerAddress")
    order_code: str = Field(..., alias="orderCode")
    subtotal: float
    delivery_fee: float = Field(..., alias="deliveryFee")
    total: float
    notes: str = ""
    items: Optional[List[OrderItemResponse]] = None

    @classmethod
    def from_domain(cls, order: OrderDomain, with_items: bool = True) -> "OrderResponse":
        return cls(
            id=order.id,
            order_date=order.order_date,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_address=order.customer_address,
            order_code=order.order_code,
            subtotal=float(order.subtotal.amount),
            delivery_fee=float(order.delivery_fee.amount),
            total=float(order.total.amount),
            notes=order.notes,
            items=[OrderItemResponse.from_domain(item) for item in order.items] if with_items else None,
        )


class ConsolidationResponse(OrderResponse):
    """Resultado de crear o consolidar un pedido."""

    action: str = Field(..., description="created | merged")
    items_inserted: int = Field(..., alias="itemsInserted")
    items_merged: int = Field(..., alias="itemsMerged")

    @classmethod
    def from_result(cls, result: ConsolidationResult) -> "ConsolidationResponse":
        base = OrderResponse.from_domain(result.order, with_items=False)
        return cls(
            **base.model_dump(exclude={"items"}),
            action=result.action,
            items_inserted=result.items_inserted,
            items_merged=result.items_merged,
        )


class UpdatedOrderResponse(WireModel):
    updated: bool = True
    order: OrderResponse


class DeletedOrderResponse(WireModel):
    deleted: bool = True
    id: int


class ImportErrorEntry(WireModel):
    group: Optional[str] = None
    date: Optional[str] = None
    customer: Optional[str] = None
    error_code: Optional[str] = Field(None, alias="errorCode")
    message: str


class ImportResponse(WireModel):
    """Contadores de una importación masiva."""

    orders_processed: int = Field(..., alias="ordersProcessed")
    created: int
    merged: int
    items_inserted: int = Field(..., alias="itemsInserted")
    skipped: int
    failed: int
    errors: List[ImportErrorEntry] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResponse":
        return cls(
            orders_processed=result.orders_processed,
            created=result.created,
            merged=result.merged,
            items_inserted=result.items_inserted,
            skipped=result.skipped,
            failed=result.failed,
            errors=[ImportErrorEntry(**error) for error in result.errors],
        )
