"""
utils.py
Environment and logging setup for entrypoints (CLI, API).
"""

import os, logging
from dotenv import load_dotenv

def load_env():
    # Load .env file; warn when the catalog endpoint falls back to localhost.
    load_dotenv()
    if not os.getenv("CATALOG_BASE_URL"):
        logging.getLogger(__name__).warning("[config] CATALOG_BASE_URL not set; using local default")

def setup_logging(level=None):
    # Configure root logging once; library modules only create loggers.
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, lvl, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
