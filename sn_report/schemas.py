from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class RecordKind(str, Enum):
    """The five upload modes. Values match the upload selector of the web app."""

    INVENTORY = "new"
    SELLTHRU = "update"
    TOPUP = "topup"
    BUCKET = "bucket"
    DISTRIBUTION = "adisti"


class SNStatus(str, Enum):
    READY = "Ready"
    SUCCESS_SOLD = "Sukses ST"
    FAILED_SOLD = "Gagal ST"


class InventoryItem(BaseModel):
    """
    One serial-numbered unit ("Report SN"). Created by a "new" upload with
    status Ready, later confirmed sold by a sellthru update or marked by hand.
    """

    id: Optional[str] = None
    sn_number: str = Field(..., min_length=1)
    flag: str = "-"
    product_name: str = "Unknown"
    sub_category: str = "General"
    warehouse: str = "Gudang Utama"
    salesforce_name: str = "-"
    tap: str = "-"
    no_rs: str = "-"
    expired_date: date
    status: SNStatus = SNStatus.READY
    created_at: datetime
    # Filled in once the unit is sold through an outlet
    price: int = Field(default=0, ge=0)
    transaction_id: str = ""
    id_digipos: str = ""
    nama_outlet: str = ""

    class Config:
        validate_assignment = True


class SellthruUpdate(BaseModel):
    """Patch applied to an existing InventoryItem, matched by serial number."""

    sn_number: str = Field(..., min_length=1)
    sale_date: str
    id_digipos: str = ""
    nama_outlet: str = ""
    price: int = Field(default=0, ge=0)
    transaction_id: str = ""


class TopupTransaction(BaseModel):
    id: Optional[str] = None
    transaction_date: str = ""
    sender: str = ""
    receiver: str = ""
    transaction_type: str = ""
    amount: int = Field(..., ge=0)
    currency: str = "IDR"
    remarks: str = ""
    salesforce: str = ""
    tap: str = ""
    id_digipos: str = ""
    nama_outlet: str = ""


class BucketTransaction(TopupTransaction):
    """Same shape as a topup, stored in the bucket collection."""


class DistributionRecord(BaseModel):
    """An Adisti (principal) record confirming a unit moved through distribution."""

    id: Optional[str] = None
    created_at: str
    sn_number: str = Field(..., min_length=1)
    warehouse: str = "-"
    product_name: str = "-"
    salesforce_name: str = "-"
    no_rs: str = "-"
    id_digipos: str = "-"
    nama_outlet: str = "-"
    tap: str = "-"


RECORD_MODELS: dict[RecordKind, type[BaseModel]] = {
    RecordKind.INVENTORY: InventoryItem,
    RecordKind.SELLTHRU: SellthruUpdate,
    RecordKind.TOPUP: TopupTransaction,
    RecordKind.BUCKET: BucketTransaction,
    RecordKind.DISTRIBUTION: DistributionRecord,
}


class ColumnMapping(BaseModel):
    """Field name -> column index, shared by every row of one file."""

    columns: dict[str, int]
    positional: bool = False

    def index_of(self, field: str) -> Optional[int]:
        return self.columns.get(field)


class IngestResult(BaseModel):
    kind: RecordKind
    records: list[Any]
    delimiter: str
    mapping: ColumnMapping
    warnings: list[str] = Field(default_factory=list)


class SellthruResult(BaseModel):
    success: int = 0
    failed: int = 0


class ReconciliationSummary(BaseModel):
    """
    Dashboard figures for the caller's working set.
    "Securing" covers sold units with no matching Adisti record.
    """

    total_items: int = 0
    total_ready: int = 0
    total_success: int = 0
    total_failed: int = 0
    matched_sales: int = 0
    securing: int = 0
    total_topup: int = 0
    total_sales_amount: int = 0
    total_securing_amount: int = 0
    outstanding_balance: int = 0
