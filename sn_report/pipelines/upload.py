import logging
from pathlib import Path
from typing import Optional

from sn_report import data_handler, utils
from sn_report.ingest import ingest
from sn_report.pipeline import DataPipeline
from sn_report.repository import Repository
from sn_report.schemas import IngestResult, RecordKind, SellthruResult
from sn_report.uploader import ChunkedUploader

logger = logging.getLogger(__name__)


def log_progress(processed: int, total: int, percent: int):
    logger.info(f"  > ⏳ Progress: {processed}/{total} ({percent}%)")


class UploadPipeline(DataPipeline):
    """Reads one CSV file, normalizes it into `kind` records and uploads them in batches."""

    def __init__(
        self,
        kind: RecordKind,
        file_path: Path,
        repository: Repository,
        uploader: Optional[ChunkedUploader] = None,
        output_dir: Optional[Path] = None,
        test_mode: bool = False,
    ):
        self.kind = RecordKind(kind)
        super().__init__(f"{self.kind.value} upload", test_mode=test_mode)
        self.file_path = Path(file_path)
        self.repository = repository
        self.uploader = uploader or ChunkedUploader()
        self.output_dir = output_dir
        self.uploaded = 0
        # Summed over batches; only sellthru uploads report matches.
        self.sellthru_result = SellthruResult() if self.kind == RecordKind.SELLTHRU else None

    def _send_batch(self, batch: list):
        result = self.repository.send_batch(self.kind, batch)
        if isinstance(result, SellthruResult):
            self.sellthru_result.success += result.success
            self.sellthru_result.failed += result.failed
        return result

    def extract(self) -> str:
        logger.info(f"  > Reading: {self.file_path.name}")
        return utils.load_text(self.file_path)

    def transform(self, text: str) -> IngestResult:
        return ingest(text, self.kind)

    def load(self, result: IngestResult) -> None:
        data_handler.save_outputs(result.records, f"{self.kind.value}_upload", self.output_dir)

        if self.test_mode:
            logger.info("🧪 Test Mode: Skipping upload.")
            return

        self.uploaded = self.uploader.upload(
            result.records,
            self._send_batch,
            on_progress=log_progress,
        )

        if self.sellthru_result is not None:
            logger.info(
                f"✅ Sellthru: {self.sellthru_result.success} updated, "
                f"{self.sellthru_result.failed} failed or not found."
            )
