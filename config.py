"""
Configuration file for shapematch

This file contains the customizable defaults used when compiling record
shapes into composite regular expressions and when exporting scraped records.
You can modify these settings without changing the core matching code.

Every value can also be overridden from the environment (or a .env file):
- SHAPEMATCH_DELIMITER   regex inserted before every field fragment
- SHAPEMATCH_UNGREEDY    "1"/"true"/"yes" to swap quantifier greediness
- SHAPEMATCH_IGNORECASE  "1"/"true"/"yes" to match case-insensitively
- SHAPEMATCH_LOG_LEVEL   logging level used by the demo script
- OUTPUT_FOLDER          where exported CSV files are written
- CSV_FILENAME_PREFIX    prefix of generated CSV filenames
"""

import os
import re

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean switch from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# FIELD METADATA
# =============================================================================

# A fragment equal to this marks the field as "do not match"
SKIP_SENTINEL = "-"

# Dedicated key looked up in a pydantic field's json_schema_extra.
# When absent, the field description is used as the raw fragment.
FRAGMENT_KEY = "match"

# =============================================================================
# PATTERN COMPILATION
# =============================================================================

# Skips any run of characters (newlines included) between two fields.
# Already lazy, so the ungreedy dialect leaves it as is.
BUILTIN_DELIMITER = r"[\s\S]*?"

# A delimiter from the environment is written in the active dialect, like
# one passed to compile_with_delimiter
DEFAULT_DELIMITER = os.getenv("SHAPEMATCH_DELIMITER", BUILTIN_DELIMITER)

# Swap the greediness of every quantifier in fragments and delimiters
UNGREEDY_BY_DEFAULT = _env_flag("SHAPEMATCH_UNGREEDY")

# Line anchors always operate per line; extra flags are added on top
BASE_REGEX_FLAGS = re.MULTILINE
EXTRA_REGEX_FLAGS = re.IGNORECASE if _env_flag("SHAPEMATCH_IGNORECASE") else 0

# =============================================================================
# EXPORT SETTINGS
# =============================================================================

OUTPUT_FOLDER = os.getenv("OUTPUT_FOLDER", "output")
CSV_FILENAME_PREFIX = os.getenv("CSV_FILENAME_PREFIX", "shapematch_records")

LOG_LEVEL = os.getenv("SHAPEMATCH_LOG_LEVEL", "INFO").upper()
