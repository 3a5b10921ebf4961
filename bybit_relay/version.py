"""
PURPOSE: Version metadata for the relay, read from the bundled version.json.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

VERSION_FILE = Path(__file__).parent / "version.json"

_version_cache: Optional[Dict[str, Any]] = None


def get_version() -> Dict[str, Any]:
    """
    PURPOSE: Return the parsed version.json, reading it once per process.

    Returns:
        Dict[str, Any]: At least `version` and `codename`.

    Raises:
        FileNotFoundError: version.json was not packaged.
        json.JSONDecodeError: version.json is not valid JSON.
    """
    global _version_cache
    if _version_cache is None:
        _version_cache = json.loads(VERSION_FILE.read_text(encoding="utf-8"))
    return _version_cache


def get_version_string() -> str:
    """Version number alone, "unknown" when the metadata cannot be read."""
    try:
        return str(get_version().get("version", "unknown"))
    except (OSError, ValueError):
        return "unknown"
