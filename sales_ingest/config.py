"""
Configuration loaded from the environment (and a .env file when present).

The remote spreadsheet is caller configuration, never a parser constant.
"""

import os
from dotenv import load_dotenv
load_dotenv()

# Remote Google Sheets export. A full URL wins over a bare sheet id.
SALES_SHEET_URL = os.getenv("SALES_SHEET_URL")
SALES_SHEET_ID = os.getenv("SALES_SHEET_ID")
SALES_FETCH_TIMEOUT = float(os.getenv("SALES_FETCH_TIMEOUT", "10"))

# "activity" or "named_product", see rules.FILTER_POLICIES
SALES_ROW_FILTER = os.getenv("SALES_ROW_FILTER", "activity")

SALES_LOG_LEVEL = os.getenv("SALES_LOG_LEVEL", "INFO").upper()
