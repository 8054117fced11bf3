import logging
import re
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

BOM = "\ufeff"
_LINE_BREAK = re.compile(r"\r\n|\n|\r")
_NON_DIGIT = re.compile(r"\D")


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def load_text(file_path: Path) -> str:
    """
    Reads an uploaded file with an encoding fallback:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can read any byte (exports from older spreadsheet tools).
    A missing file is not recovered here; the caller decides what to do.
    """
    try:
        return file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'.")
        return file_path.read_text(encoding="latin-1")


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(BOM) else text


def split_lines(text: str) -> list[str]:
    """
    Splits on CRLF, LF or CR and drops blank lines.
    Quoted fields spanning several lines are not supported.
    """
    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def clean_field(value) -> str:
    """Trims whitespace and one pair of surrounding double or single quotes."""
    if value is None:
        return ""
    text = str(value).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1].strip()
    return text


def digits_only(value) -> str:
    """'Rp 210.000' -> '210000'."""
    return _NON_DIGIT.sub("", clean_field(value))
