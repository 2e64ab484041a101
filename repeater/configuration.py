"""
Configuration constants for the access-log repeater.

This module contains all configuration parameters including:
- Logging defaults
- Replay timing defaults
- HTTP client and status handling
- Input schema field names
- Process exit codes
"""

import os
from typing import Optional

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL: str = os.getenv("REPEATER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = "%(asctime)s - %(levelname)s - %(message)s"
LOG_URL_TRUNCATE: int = 64  # Characters of the URL shown in per-request debug lines

# =============================================================================
# REPLAY TIMING
# =============================================================================

DEFAULT_TIME_FACTOR: float = 1.0

# =============================================================================
# HTTP CLIENT
# =============================================================================

# aiohttp's own connector default; 0 disables the limit
DEFAULT_CONNECTION_LIMIT: int = int(os.getenv("REPEATER_CONNECTION_LIMIT", "100"))

# None leaves the client's default timeout in place
_timeout_env = os.getenv("REPEATER_REQUEST_TIMEOUT_SECONDS")
REQUEST_TIMEOUT_SECONDS: Optional[float] = float(_timeout_env) if _timeout_env else None

# =============================================================================
# HTTP STATUS CODES
# =============================================================================

SUCCESS_STATUS_MIN: int = 200
SUCCESS_STATUS_MAX: int = 299

# =============================================================================
# INPUT SCHEMA
# =============================================================================

FIELD_TIMESTAMP: str = "@timestamp"
FIELD_DOMAIN_NAME: str = "domain_name"
FIELD_PATH: str = "path"
FIELD_PARAMETERS: str = "params"
FIELD_REQUIRED_TIME: str = "target_processing_time"

CSV_REQUIRED_COLUMNS = (FIELD_TIMESTAMP, FIELD_PATH, FIELD_PARAMETERS, FIELD_REQUIRED_TIME)

JSON_SOURCE_KEY: str = "_source"

CSV_EXTENSION: str = ".csv"
JSON_EXTENSION: str = ".json"

# =============================================================================
# PROGRESS DISPLAY
# =============================================================================

PROGRESS_BAR_FORMAT: str = "[{elapsed}] {bar} {n_fmt:>7}/{total_fmt:7}"

# =============================================================================
# EXIT CODES
# =============================================================================

EXIT_SUCCESS: int = 0
EXIT_FAILURE: int = 1
EXIT_ABORTED: int = 130  # 128 + SIGINT
