import logging
from typing import Optional

import pandas as pd

from .schemas import (
    DistributionRecord,
    InventoryItem,
    ReconciliationSummary,
    SNStatus,
    TopupTransaction,
)

logger = logging.getLogger(__name__)

ITEM_COLUMNS = ["sn_number", "status", "price"]


def _items_frame(items: list[InventoryItem]) -> pd.DataFrame:
    rows = [{"sn_number": i.sn_number, "status": SNStatus(i.status).value, "price": i.price} for i in items]
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def filter_by_scope(records: list, salesforce: Optional[str] = None, tap: Optional[str] = None) -> list:
    """
    Keeps the records visible to one salesforce and/or TAP.
    Inventory and Adisti records name the seller `salesforce_name`, transactions `salesforce`.
    """

    def seller(record) -> Optional[str]:
        return getattr(record, "salesforce_name", None) or getattr(record, "salesforce", None)

    return [
        r
        for r in records
        if (salesforce is None or seller(r) == salesforce) and (tap is None or r.tap == tap)
    ]


def build_reconciliation(
    items: list[InventoryItem],
    topups: list[TopupTransaction],
    distribution: list[DistributionRecord],
) -> ReconciliationSummary:
    """
    Reconciles sold units against Adisti records and topups.

    A sold unit whose SN appears in the Adisti set is a matched sale; otherwise
    it is "securing". Outstanding balance = total topup - price of every sold unit.
    Inputs are expected to be filtered to the caller's scope already.
    """
    items_df = _items_frame(items)
    items_df["price"] = pd.to_numeric(items_df["price"], errors="coerce").fillna(0)

    sold = items_df[items_df["status"] == SNStatus.SUCCESS_SOLD.value]
    adisti_sns = {record.sn_number for record in distribution}
    matched_mask = sold["sn_number"].isin(adisti_sns)

    total_topup = int(sum(t.amount for t in topups))
    total_sold_amount = int(sold["price"].sum())
    status_counts = items_df["status"].value_counts()

    summary = ReconciliationSummary(
        total_items=len(items_df),
        total_ready=int(status_counts.get(SNStatus.READY.value, 0)),
        total_success=int(status_counts.get(SNStatus.SUCCESS_SOLD.value, 0)),
        total_failed=int(status_counts.get(SNStatus.FAILED_SOLD.value, 0)),
        matched_sales=int(matched_mask.sum()),
        securing=int((~matched_mask).sum()),
        total_topup=total_topup,
        total_sales_amount=int(sold.loc[matched_mask, "price"].sum()),
        total_securing_amount=int(sold.loc[~matched_mask, "price"].sum()),
        outstanding_balance=total_topup - total_sold_amount,
    )

    logger.info(
        f"📊 Matched sales: {summary.matched_sales}, securing: {summary.securing}, "
        f"outstanding balance: {summary.outstanding_balance}"
    )
    return summary
