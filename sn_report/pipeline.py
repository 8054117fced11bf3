import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for data pipelines (Upload, Reconcile).
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode

    def run(self) -> Any:
        """
        Orchestrates the pipeline execution. Terminal errors propagate to the caller.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()}")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> Any:
        """Reads the raw input (a file, or collections from the repository)."""
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Any:
        """Normalizes or aggregates the raw input into validated Pydantic models."""
        pass

    @abstractmethod
    def load(self, result: Any) -> None:
        """Saves outputs to disk and, outside test mode, sends them on."""
        pass
