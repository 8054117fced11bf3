import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel

from . import settings
from .schemas import (
    BucketTransaction,
    ColumnMapping,
    DistributionRecord,
    InventoryItem,
    RecordKind,
    SellthruUpdate,
    SNStatus,
    TopupTransaction,
)
from .utils import clean_field, digits_only

logger = logging.getLogger(__name__)


def _cell(cells: list[str], mapping: ColumnMapping, field: str) -> str:
    """Cleaned value of `field`, or '' when the column is unmapped or the row is short."""
    idx = mapping.index_of(field)
    if idx is None or idx >= len(cells):
        return ""
    return clean_field(cells[idx])


def _valid_sn(sn: str) -> bool:
    return len(sn) > settings.MIN_SN_LENGTH


def parse_inventory_row(
    cells: list[str], mapping: ColumnMapping, now: datetime, line_no: int
) -> Optional[InventoryItem]:
    sn = _cell(cells, mapping, "sn_number")
    if not _valid_sn(sn):
        return None

    def value(field: str, default: str) -> str:
        return _cell(cells, mapping, field) or default

    return InventoryItem(
        sn_number=sn,
        flag=value("flag", settings.PLACEHOLDER),
        product_name=value("product_name", settings.DEFAULT_PRODUCT),
        sub_category=value("sub_category", settings.DEFAULT_CATEGORY),
        warehouse=value("warehouse", settings.DEFAULT_WAREHOUSE),
        salesforce_name=value("salesforce_name", settings.PLACEHOLDER),
        tap=value("tap", settings.PLACEHOLDER),
        no_rs=value("no_rs", settings.PLACEHOLDER),
        expired_date=(now + timedelta(days=settings.EXPIRY_DAYS)).date(),
        status=SNStatus.READY,
        created_at=now,
    )


def parse_sellthru_row(
    cells: list[str], mapping: ColumnMapping, now: datetime, line_no: int
) -> Optional[SellthruUpdate]:
    sn = _cell(cells, mapping, "sn_number")
    if not sn:
        return None

    price = digits_only(_cell(cells, mapping, "price"))
    return SellthruUpdate(
        sn_number=sn,
        sale_date=_cell(cells, mapping, "sale_date") or now.date().isoformat(),
        id_digipos=_cell(cells, mapping, "id_digipos"),
        nama_outlet=_cell(cells, mapping, "nama_outlet"),
        price=int(price) if price else 0,
        transaction_id=_cell(cells, mapping, "transaction_id"),
    )


def _make_transaction_parser(model: type[TopupTransaction], kind: RecordKind):
    def parse_transaction_row(
        cells: list[str], mapping: ColumnMapping, now: datetime, line_no: int
    ) -> Optional[TopupTransaction]:
        # "210.000" (dotted thousands) -> 210000
        amount = digits_only(_cell(cells, mapping, "amount"))
        if not amount:
            return None

        return model(
            id=f"{kind.value}-{now.strftime('%Y%m%d%H%M%S')}-{line_no}-{uuid.uuid4().hex[:8]}",
            transaction_date=_cell(cells, mapping, "transaction_date"),
            sender=_cell(cells, mapping, "sender"),
            receiver=_cell(cells, mapping, "receiver"),
            transaction_type=_cell(cells, mapping, "transaction_type"),
            amount=int(amount),
            currency=_cell(cells, mapping, "currency") or settings.DEFAULT_CURRENCY,
            remarks=_cell(cells, mapping, "remarks"),
            salesforce=_cell(cells, mapping, "salesforce"),
            tap=_cell(cells, mapping, "tap"),
            id_digipos=_cell(cells, mapping, "id_digipos"),
            nama_outlet=_cell(cells, mapping, "nama_outlet"),
        )

    return parse_transaction_row


def parse_distribution_row(
    cells: list[str], mapping: ColumnMapping, now: datetime, line_no: int
) -> Optional[DistributionRecord]:
    sn = _cell(cells, mapping, "sn_number")
    if not _valid_sn(sn):
        return None

    def value(field: str) -> str:
        return _cell(cells, mapping, field) or settings.PLACEHOLDER

    return DistributionRecord(
        created_at=_cell(cells, mapping, "created_at") or now.isoformat(timespec="seconds"),
        sn_number=sn,
        warehouse=value("warehouse"),
        product_name=value("product_name"),
        salesforce_name=value("salesforce_name"),
        no_rs=value("no_rs"),
        id_digipos=value("id_digipos"),
        nama_outlet=value("nama_outlet"),
        tap=value("tap"),
    )


RowParser = Callable[[list[str], ColumnMapping, datetime, int], Optional[BaseModel]]

# --- Parser Registry ---
# One row parser per upload kind.
PARSER_REGISTRY: dict[RecordKind, RowParser] = {
    RecordKind.INVENTORY: parse_inventory_row,
    RecordKind.SELLTHRU: parse_sellthru_row,
    RecordKind.TOPUP: _make_transaction_parser(TopupTransaction, RecordKind.TOPUP),
    RecordKind.BUCKET: _make_transaction_parser(BucketTransaction, RecordKind.BUCKET),
    RecordKind.DISTRIBUTION: parse_distribution_row,
}


def parse_row(
    kind: RecordKind, cells: list[str], mapping: ColumnMapping, now: datetime, line_no: int = 0
) -> Optional[BaseModel]:
    """Normalizes one tokenized row, or returns None if the row is discarded."""
    return PARSER_REGISTRY[kind](cells, mapping, now, line_no)
