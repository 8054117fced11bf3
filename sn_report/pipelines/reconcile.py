import logging
from pathlib import Path
from typing import Optional

from sn_report import data_handler
from sn_report.pipeline import DataPipeline
from sn_report.reconciliation import build_reconciliation, filter_by_scope
from sn_report.repository import Repository
from sn_report.schemas import RecordKind, ReconciliationSummary

logger = logging.getLogger(__name__)


class ReconcilePipeline(DataPipeline):
    """Fetches inventory, topups and Adisti records, and reports the reconciliation figures."""

    def __init__(
        self,
        repository: Repository,
        salesforce: Optional[str] = None,
        tap: Optional[str] = None,
        output_dir: Optional[Path] = None,
        test_mode: bool = False,
    ):
        super().__init__("reconciliation", test_mode=test_mode)
        self.repository = repository
        self.salesforce = salesforce
        self.tap = tap
        self.output_dir = output_dir

    def extract(self) -> dict[RecordKind, list]:
        data = {}
        for kind in (RecordKind.INVENTORY, RecordKind.TOPUP, RecordKind.DISTRIBUTION):
            records = filter_by_scope(self.repository.list(kind), self.salesforce, self.tap)
            logger.info(f"  > Loaded {len(records)} '{kind.value}' records.")
            data[kind] = records
        return data

    def transform(self, data: dict[RecordKind, list]) -> ReconciliationSummary:
        return build_reconciliation(
            data[RecordKind.INVENTORY],
            data[RecordKind.TOPUP],
            data[RecordKind.DISTRIBUTION],
        )

    def load(self, summary: ReconciliationSummary) -> None:
        logger.info("\n--- Reconciliation Summary ---")
        for field, value in summary.model_dump().items():
            logger.info(f"{field}: {value}")

        if self.test_mode:
            logger.info("🧪 Test Mode: Skipping summary file.")
            return
        data_handler.save_outputs([summary], "reconciliation_summary", self.output_dir)
