"""
BatchImportOrchestrator - bulk import of flat order rows.

Rows are grouped by (date, customer name) and every group goes through
the same consolidation pipeline as an interactive create-or-merge call,
each group in its own transaction. A failing group is reported and the
batch moves on.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from smb_orders.core.config import get_settings
from smb_orders.core.logging_config import LogContext, log_order_operation
from smb_orders.db.connection import ConnDB
from smb_orders.domain.models import OrderLine
from smb_orders.domain.value_objects import is_blank
from smb_orders.services.orders.commands import ImportResult
from smb_orders.services.orders.interfaces import IConsolidator, IEntityResolver
from smb_orders.services.orders.orchestrator import OrderConsolidationOrchestrator, create_orchestrator
from smb_orders.services.orders.resolvers import EntityResolver, ImportContext
from smb_orders.services.orders.validators import OrderValidator
from smb_orders.utils.error_handler import ErrorAggregator, ErrorCode, ValidationException

settings = get_settings()
logger = logging.getLogger(__name__)


@dataclass
class ImportLine:
    """One product line of an import group, still keyed by product name."""

    product_name: str
    qty: Any
    price: Any


@dataclass
class ImportGroup:
    """Rows sharing a (date, customer name) key."""

    date_text: str
    customer_name: str
    customer_phone: str = ""
    customer_address: str = ""
    delivery_fee: Any = None
    notes: str = ""
    lines: list[ImportLine] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.date_text}||{self.customer_name}"


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def group_rows(rows: Iterable[Mapping[str, Any]]) -> tuple[list[ImportGroup], int]:
    """
    Group flat rows by (first 10 characters of date, trimmed customer name).

    Contact data, delivery fee and notes are taken from the first row of a
    group; later rows only contribute product lines. Rows missing the date,
    customer name or product name are skipped.

    Returns:
        tuple: (groups in first-seen order, number of skipped rows)
    """
    groups: "OrderedDict[str, ImportGroup]" = OrderedDict()
    skipped = 0

    for row in rows:
        date_text = _text(row.get("date"))[:10]
        customer_name = _text(row.get("customerName"))
        product_name = _text(row.get("productName"))

        if not date_text or not customer_name or not product_name:
            skipped += 1
            continue

        key = f"{date_text}||{customer_name}"
        group = groups.get(key)
        if group is None:
            fee = row.get("deliveryFee")
            group = ImportGroup(
                date_text=date_text,
                customer_name=customer_name,
                customer_phone=_text(row.get("customerPhone")),
                customer_address=_text(row.get("customerAddress")),
                delivery_fee=None if is_blank(fee) else fee,
                notes=_text(row.get("notes")),
            )
            groups[key] = group

        group.lines.append(ImportLine(product_name=product_name, qty=row.get("qty"), price=row.get("price")))

    return list(groups.values()), skipped


class BatchImportOrchestrator:
    """
    Orchestrates bulk imports on top of the single-order pipeline.
    """

    def __init__(
        self,
        orchestrator: IConsolidator,
        entity_resolver: IEntityResolver,
        validator: OrderValidator,
        conn_db: ConnDB,
        max_rows: int = 5000,
    ):
        """
        Initialize with service dependencies (DIP).

        Args:
            orchestrator: Single-order orchestrator providing ``consolidate``
            entity_resolver: Service resolving names to customer/product ids
            validator: Service for parsing dates and amounts
            conn_db: Connection used to open one transaction per group
            max_rows: Upper bound on rows per call
        """
        self.orchestrator = orchestrator
        self.entity_resolver = entity_resolver
        self.validator = validator
        self.conn_db = conn_db
        self.max_rows = max_rows

    async def import_rows(self, rows: list[Mapping[str, Any]]) -> ImportResult:
        """
        Import flat rows, consolidating them into orders.

        Args:
            rows: Dicts with date, customerName, customerPhone?, customerAddress?,
                productName, qty, price, deliveryFee?, notes?

        Returns:
            ImportResult: Counters plus per-group errors

        Raises:
            ValidationException: If ``rows`` is empty or too large
        """
        if not rows:
            raise ValidationException(
                message="No rows provided", field="rows", error_code=ErrorCode.MISSING_REQUIRED_FIELD
            )
        if len(rows) > self.max_rows:
            raise ValidationException(
                message=f"Too many rows: {len(rows)} > {self.max_rows}",
                field="rows",
                invalid_value=len(rows),
            )

        groups, skipped = group_rows(rows)
        ctx = ImportContext()
        result = ImportResult(skipped=skipped)
        aggregator = ErrorAggregator()

        with LogContext(import_id=ctx.import_id):
            logger.info(f"📥 Import {ctx.import_id}: {len(rows)} rows, {len(groups)} groups, {skipped} skipped")

            for group in groups:
                aggregator.increment_processed()
                try:
                    await self._import_group(ctx, group, result)
                except Exception as e:
                    result.failed += 1
                    aggregator.add_error(e, {"group": group.key, "date": group.date_text, "customer": group.customer_name})

            summary = aggregator.get_summary()
            result.errors = summary["errors"]
            # import_id comes from LogContext; passing it again in extra would clash
            log_order_operation(
                "import",
                None,
                orders_processed=result.orders_processed,
                groups=summary["total_processed"],
                failed=summary["error_count"],
            )
            logger.info(
                f"✅ Import {ctx.import_id} finished in {summary['duration_seconds']:.2f}s: "
                f"{result.orders_processed} orders ({result.created} created, {result.merged} merged), "
                f"{result.items_inserted} items, {result.failed} failed groups"
            )

        return result

    async def _import_group(self, ctx: ImportContext, group: ImportGroup, result: ImportResult) -> None:
        order_date = self.validator.parse_date(group.date_text, "date")
        delivery_fee: Optional[Decimal] = (
            None if group.delivery_fee is None else self.validator.parse_amount(group.delivery_fee, "deliveryFee")
        )

        customer_id = await self.entity_resolver.resolve_customer(
            ctx, group.customer_name, group.customer_phone, group.customer_address
        )

        lines = []
        for line in group.lines:
            product_id = await self.entity_resolver.resolve_product(ctx, line.product_name)
            lines.append(
                OrderLine(
                    product_id=product_id,
                    qty=self.validator.parse_amount(line.qty, "qty"),
                    price=self.validator.parse_amount(line.price, "price"),
                )
            )

        async with self.conn_db.transaction() as session:
            outcome = await self.orchestrator.consolidate(
                session,
                order_date,
                customer_id,
                lines,
                delivery_fee=delivery_fee,
                notes=group.notes or None,
                known_order_id=ctx.order_ids.get((order_date, customer_id)),
            )

        # Counted only once the group's transaction has committed
        ctx.order_ids[(order_date, customer_id)] = outcome.order.id
        result.record(outcome)
        logger.debug(f"Group {group.key} → order {outcome.order.id} ({outcome.action})")


def create_batch_importer(
    conn_db: Optional[ConnDB] = None, orchestrator: Optional[OrderConsolidationOrchestrator] = None
) -> BatchImportOrchestrator:
    """
    Factory function to create a fully wired batch importer.

    Args:
        conn_db: Database connection (defaults to the global one)
        orchestrator: Existing single-order orchestrator to share

    Returns:
        BatchImportOrchestrator: Configured importer
    """
    orchestrator = orchestrator or create_orchestrator(conn_db)

    return BatchImportOrchestrator(
        orchestrator=orchestrator,
        entity_resolver=EntityResolver(
            customer_repo=orchestrator.customer_repo, product_repo=orchestrator.product_repo
        ),
        validator=orchestrator.validator,
        conn_db=orchestrator.conn_db,
        max_rows=settings.IMPORT_MAX_ROWS,
    )
