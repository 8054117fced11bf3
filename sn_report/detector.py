"""
Delimiter and column detection for uploaded CSV files.

Header cells are matched against a fixed list of synonyms per field. When the
primary key column cannot be found by name, the kind's documented positional
layout is used instead.
"""

import csv
import logging
from typing import Optional

from .schemas import ColumnMapping, RecordKind
from .utils import clean_field

logger = logging.getLogger(__name__)

_TRANSACTION_LAYOUT = [
    "transaction_date",
    "sender",
    "receiver",
    "transaction_type",
    "amount",
    "currency",
    "remarks",
    "salesforce",
    "tap",
    "id_digipos",
    "nama_outlet",
]

# Column order of each kind's CSV template.
POSITIONAL_LAYOUTS: dict[RecordKind, list[str]] = {
    RecordKind.INVENTORY: [
        "sn_number",
        "flag",
        "product_name",
        "sub_category",
        "warehouse",
        "salesforce_name",
        "tap",
        "no_rs",
    ],
    RecordKind.SELLTHRU: [
        "sn_number",
        "id_digipos",
        "nama_outlet",
        "price",
        "transaction_id",
        "sale_date",
    ],
    RecordKind.TOPUP: _TRANSACTION_LAYOUT,
    RecordKind.BUCKET: _TRANSACTION_LAYOUT,
    RecordKind.DISTRIBUTION: [
        "created_at",
        "sn_number",
        "warehouse",
        "product_name",
        "salesforce_name",
        "no_rs",
        "id_digipos",
        "nama_outlet",
        "tap",
    ],
}

PRIMARY_KEYS: dict[RecordKind, str] = {
    RecordKind.INVENTORY: "sn_number",
    RecordKind.SELLTHRU: "sn_number",
    RecordKind.TOPUP: "amount",
    RecordKind.BUCKET: "amount",
    RecordKind.DISTRIBUTION: "sn_number",
}

# Transaction exports are positional by nature; a field missing by name keeps its template index.
PER_FIELD_FALLBACK = {RecordKind.TOPUP, RecordKind.BUCKET}

_SN = ["sn", "sn_number", "no_sn", "nosn", "no_tr_sn", "notrsn", "serial_number", "serial"]
_SALESFORCE = ["salesforce", "salesforce_name", "sales", "sf", "nama_sales"]
_OUTLET_ID = ["id_digipos", "digipos", "iddigipos", "outlet_id", "id_outlet"]
_OUTLET_NAME = ["nama_outlet", "outlet", "outlet_name"]
_PRODUCT = ["product", "product_name", "produk", "nama_produk"]
_WAREHOUSE = ["gudang", "warehouse"]
_REFERENCE = ["no_rs", "rs", "number_rs", "reference", "reference_no"]

_TRANSACTION_SYNONYMS = {
    "transaction_date": ["transaction date", "transaction_date", "date", "tanggal"],
    "sender": ["sender", "pengirim"],
    "receiver": ["receiver", "penerima"],
    "transaction_type": ["transaction type", "transaction_type", "type", "tipe"],
    "amount": ["amount", "jumlah", "nominal"],
    "currency": ["currency", "mata uang"],
    "remarks": ["remarks", "keterangan", "remark"],
    "salesforce": _SALESFORCE,
    "tap": ["tap"],
    "id_digipos": _OUTLET_ID + ["id digipos"],
    "nama_outlet": _OUTLET_NAME + ["nama outlet"],
}

FIELD_SYNONYMS: dict[RecordKind, dict[str, list[str]]] = {
    RecordKind.INVENTORY: {
        "sn_number": _SN,
        "flag": ["flag"],
        "product_name": _PRODUCT,
        "sub_category": ["kategori", "category", "sub_category", "subcategory"],
        "warehouse": _WAREHOUSE,
        "salesforce_name": _SALESFORCE,
        "tap": ["tap"],
        "no_rs": _REFERENCE,
    },
    RecordKind.SELLTHRU: {
        "sn_number": _SN,
        "id_digipos": _OUTLET_ID,
        "nama_outlet": _OUTLET_NAME,
        "price": ["harga", "price"],
        "transaction_id": ["trx_id", "transaction_id", "id_trx", "trxid"],
        "sale_date": ["tanggal", "date", "sale_date", "tgl"],
    },
    RecordKind.TOPUP: _TRANSACTION_SYNONYMS,
    RecordKind.BUCKET: _TRANSACTION_SYNONYMS,
    RecordKind.DISTRIBUTION: {
        "created_at": ["tanggal", "date", "created_at", "created_date", "tgl"],
        "sn_number": _SN,
        "warehouse": _WAREHOUSE,
        "product_name": _PRODUCT,
        "salesforce_name": _SALESFORCE,
        "no_rs": _REFERENCE,
        "id_digipos": _OUTLET_ID,
        "nama_outlet": _OUTLET_NAME,
        "tap": ["tap"],
    },
}


def split_row(line: str, delimiter: str) -> list[str]:
    """
    Quote-aware split of a single line. A quoted cell may hold the delimiter,
    and a doubled quote inside it stands for one literal quote.
    """
    for row in csv.reader([line], delimiter=delimiter, quotechar='"', doublequote=True):
        return row
    return []


def normalize_header(token: str) -> str:
    return clean_field(token).lower().replace("_", "")


def _lookup_table(kind: RecordKind) -> dict[str, set[str]]:
    return {
        field: {normalize_header(name) for name in names}
        for field, names in FIELD_SYNONYMS[kind].items()
    }


def detect_columns(header: list[str], kind: RecordKind) -> Optional[ColumnMapping]:
    """
    Maps fields to column indexes by header name.
    Returns None when the kind's primary key column is not named in the header.
    """
    normalized = [normalize_header(token) for token in header]
    columns = {}
    for field, names in _lookup_table(kind).items():
        for idx, token in enumerate(normalized):
            if token in names:
                columns[field] = idx
                break

    if PRIMARY_KEYS[kind] not in columns:
        return None

    if kind in PER_FIELD_FALLBACK:
        for idx, field in enumerate(POSITIONAL_LAYOUTS[kind]):
            columns.setdefault(field, idx)

    return ColumnMapping(columns=columns)


def positional_mapping(kind: RecordKind) -> ColumnMapping:
    layout = POSITIONAL_LAYOUTS[kind]
    return ColumnMapping(columns={field: idx for idx, field in enumerate(layout)}, positional=True)


def describe_delimiter(delimiter: str) -> str:
    return {"\t": "TAB", ";": "';'", ",": "','", "|": "'|'"}.get(delimiter, repr(delimiter))
