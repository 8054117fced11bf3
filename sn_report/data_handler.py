import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd
from pydantic import BaseModel

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def records_to_frame(records: list[BaseModel]) -> pd.DataFrame:
    """One row per record, columns in model field order."""
    if not records:
        return pd.DataFrame()
    columns = list(type(records[0]).model_fields.keys())
    return pd.DataFrame([r.model_dump(mode="json") for r in records], columns=columns)


def save_outputs(
    validated_data: list[BaseModel], filename_base: str, output_dir: Optional[Path] = None
) -> dict[str, Path]:
    """Saves records to CSV and conditionally to JSON, with dated filenames."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{filename_base}_{date_suffix}.csv"
    json_path = output_dir / f"{filename_base}_{date_suffix}.json"
    saved = {}

    records_to_frame(validated_data).to_csv(csv_path, index=False)
    saved["csv"] = csv_path
    logger.info(f"✅ Normalized records saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [item.model_dump(mode="json") for item in validated_data]
            json.dump(json_data, f, indent=2, default=str)
        saved["json"] = json_path
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return saved
