import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent.parent


class Config:
    # --- Application Settings ---
    APP_TITLE = os.getenv("APP_TITLE", "Cost Report Studio")
    APP_ICON = os.getenv("APP_ICON", "📑")
    APP_LAYOUT = os.getenv("APP_LAYOUT", "wide")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Supabase ---
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY", os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))

    # Storage buckets, addressed as {owner_id}/{filename}
    COST_REPORT_BUCKET = os.getenv("COST_REPORT_BUCKET", "cost-report-pdfs")
    CABLE_SCHEDULE_BUCKET = os.getenv("CABLE_SCHEDULE_BUCKET", "cable-schedule-reports")
    # Handover documents live under handover/{project_id}/{filename}
    HANDOVER_BUCKET = os.getenv("HANDOVER_BUCKET", "handover-documents")

    # Metadata tables for generated artifacts
    COST_REPORT_PDF_TABLE = os.getenv("COST_REPORT_PDF_TABLE", "cost_report_pdfs")
    CABLE_SCHEDULE_PDF_TABLE = os.getenv("CABLE_SCHEDULE_PDF_TABLE", "cable_schedule_reports")
    HANDOVER_TABLE = os.getenv("HANDOVER_TABLE", "handover_documents")

    # Concurrent fetches when loading a report bundle
    FETCH_WORKERS = int(os.getenv("FETCH_WORKERS", "3"))

    # --- Report Formatting ---
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "R")
    DEFAULT_MARGIN_PRESET = os.getenv("DEFAULT_MARGIN_PRESET", "normal")
    COMPANY_NAME = os.getenv("COMPANY_NAME", "")

    # --- Local copies of generated PDFs (optional) ---
    OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "reports")
