"""
Map Prep configuration.

Paths, API settings, and rendering constants.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# --- Paths ---
PROJECT_ROOT = Path(__file__).parent
MAPS_DIR = PROJECT_ROOT / "maps"
DATA_DIR = PROJECT_ROOT / "data"
LOCATION_FILE = DATA_DIR / "locations.yaml"  # safe to source control
DOWNLOAD_DIR = PROJECT_ROOT / ".cache" / "downloads"  # do not source control
OUTPUT_DIR = PROJECT_ROOT / "output"
REPORT_DIR = DATA_DIR / "reports"  # kept out of OUTPUT_DIR, which gets published

# --- API Keys ---
WHAT3WORDS_API_KEY = os.getenv("WHAT3WORDS_API_KEY", "")
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")

USER_AGENT = "MapPrep/1.0"

# --- what3words API ---
# https://developer.what3words.com/public-api/docs#convert-to-coords
W3W_CONVERT_URL = "https://api.what3words.com/v3/convert-to-coordinates"
W3W_RATE_LIMIT = 5  # requests per second
W3W_TIMEOUT = 15  # seconds

# --- Google Static Maps API ---
STATIC_MAPS_URL = "https://maps.googleapis.com/maps/api/staticmap"
STATIC_MAPS_RATE_LIMIT = 2  # requests per second
STATIC_MAPS_TIMEOUT = 60  # seconds

MAX_MAP_EDGE_PX = 2500  # provider's largest supported single edge
MAP_SCALE = 2
MAP_FORMAT = "png"
MAP_TYPE = "satellite"

# --- Build ---
RESOLVE_WORKERS = 1  # >1 resolves distinct geocodes in parallel

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
