"""Downloadable CSV templates, one header line plus one example row per upload kind."""

import logging
from pathlib import Path
from typing import Optional

from . import settings
from .schemas import RecordKind

logger = logging.getLogger(__name__)

_TRANSACTION_HEADERS = [
    "Transaction Date",
    "Sender",
    "Receiver",
    "Transaction Type",
    "Amount",
    "Currency",
    "Remarks",
    "salesforce",
    "tap",
    "id digipos",
    "nama outlet",
]
_TRANSACTION_EXAMPLE = [
    "2025-11-26 14:59:46",
    "6282114115293",
    "82118776787",
    "Debit",
    "210.000",
    "IDR",
    "Top Up balance via SF 210000",
    "Ahmad Gunawan",
    "Pemuda",
    "2100005480",
    "MAJU JAYA",
]

TEMPLATES = {
    RecordKind.INVENTORY: {
        "filename": "template_input_report_sn.csv",
        "delimiter": ",",
        "headers": ["NO_SN", "FLAG", "NAMA_PRODUK", "KATEGORI", "GUDANG", "SALESFORCE", "TAP", "NO_RS"],
        "example": [
            "123456789012",
            "HVC",
            "Kartu Sakti 10GB",
            "Voucher Fisik",
            "Gudang Jakarta",
            "CVS KNG 05",
            "TAP Pasar Baru",
            "RS-99901",
        ],
    },
    RecordKind.SELLTHRU: {
        "filename": "template_upload_sellthru.csv",
        "delimiter": ",",
        "headers": ["SN_NUMBER", "ID_DIGIPOS", "NAMA_OUTLET", "HARGA", "TRX_ID", "TANGGAL"],
        "example": ["123456789012", "DG-10001", "Outlet Berkah Jaya", "25000", "TRX-ABC1234", "2025-11-26"],
    },
    RecordKind.TOPUP: {
        "filename": "template_upload_topup_saldo.csv",
        "delimiter": ";",
        "headers": _TRANSACTION_HEADERS,
        "example": _TRANSACTION_EXAMPLE,
    },
    RecordKind.BUCKET: {
        "filename": "template_upload_bucket_transaksi.csv",
        "delimiter": ";",
        "headers": _TRANSACTION_HEADERS,
        "example": _TRANSACTION_EXAMPLE,
    },
    RecordKind.DISTRIBUTION: {
        "filename": "template_upload_list_sn_adisti.csv",
        "delimiter": ",",
        "headers": ["TANGGAL", "NO_TR_SN", "GUDANG", "PRODUCT", "SALESFORCE", "NO_RS", "ID_DIGIPOS", "NAMA_OUTLET", "TAP"],
        "example": [
            "2025-11-26",
            "123456789012",
            "Gudang Utama",
            "Voucher 10GB",
            "CVS KNG 05",
            "RS-99901",
            "DG-10001",
            "Outlet A",
            "Pemuda",
        ],
    },
}


def render_template(kind: RecordKind, delimiter: Optional[str] = None) -> str:
    template = TEMPLATES[RecordKind(kind)]
    delimiter = delimiter or template["delimiter"]
    return delimiter.join(template["headers"]) + "\n" + delimiter.join(template["example"]) + "\n"


def write_template(kind: RecordKind, output_dir: Optional[Path] = None, delimiter: Optional[str] = None) -> Path:
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / TEMPLATES[RecordKind(kind)]["filename"]
    path.write_text(render_template(kind, delimiter), encoding="utf-8")
    logger.info(f"✅ Template saved to: {path}")
    return path
