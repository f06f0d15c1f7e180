"""
Output

Description: Persists extraction results as dated JSON documents
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional, Union

from .url_tools import get_domain

logger = logging.getLogger(__name__)


def _sanitize_file_component(name: str) -> str:
    sanitized = re.sub(r'[<>:"/\\|?*\s]', "_", name)
    sanitized = re.sub(r"_+", "_", sanitized).strip("_")
    return sanitized or "default"


def result_path(result, output_dir: Union[str, Path], day: Optional[date] = None) -> Path:
    """
    Where a result is written.

    Directory crawls go to ``brokers/``, everything else to ``sites/``; the
    file is named after the domain and the capture day.
    """
    day = day or date.today()
    kind = "brokers" if result.brokers is not None else "sites"
    domain = _sanitize_file_component(get_domain(result.original_url))
    return Path(output_dir) / kind / f"{domain}-{day.isoformat()}.json"


def save_result(result, output_dir: Union[str, Path], day: Optional[date] = None) -> Path:
    """Write one ExtractionResult as pretty-printed JSON and return the path."""
    path = result_path(result, output_dir, day)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.to_json(), encoding="utf-8")
    logger.info(f"Saved result for {result.original_url} to {path}")
    return path
