import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILE = os.getenv("LOG_FILE", "sn_report.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Output Configuration ---
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- REST API ---
API_URL = os.getenv("API_URL", "http://localhost:3000/api").rstrip("/")
API_TOKEN = os.getenv("API_TOKEN")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

# --- Chunked Upload ---
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "500"))
MAX_SEND_ATTEMPTS = int(os.getenv("MAX_SEND_ATTEMPTS", "3"))
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "2"))
BATCH_DELAY_SECONDS = float(os.getenv("BATCH_DELAY_SECONDS", "0.5"))

# --- Ingestion ---
# Order matters: the first delimiter that yields a valid row wins.
CANDIDATE_DELIMITERS = [";", ",", "\t", "|"]
# Blind positional pass, distribution (Adisti) files only.
BLIND_DELIMITERS = [";", ","]

# Serial numbers must be strictly longer than this.
MIN_SN_LENGTH = 5
EXPIRY_DAYS = int(os.getenv("EXPIRY_DAYS", "30"))

# --- Shared Business Defaults ---
PLACEHOLDER = "-"
DEFAULT_PRODUCT = "Unknown"
DEFAULT_CATEGORY = "General"
DEFAULT_WAREHOUSE = "Gudang Utama"
DEFAULT_CURRENCY = "IDR"
