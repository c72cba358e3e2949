#!/usr/bin/env python3
"""
JSON Utilities Module

Centralized JSON reading and writing with consistent pretty-printing, plus
lenient parsing of JSON embedded in free-form text-generation output.

Model output is NOT guaranteed to be valid JSON. It is frequently wrapped in
markdown code fences or surrounded by prose, so ``parse_json_object`` treats a
parse failure as an ordinary ``None`` result rather than an exception.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json|JSON)?")


def write_json(filepath: str | Path, data: Any, ensure_ascii: bool = False, sort_keys: bool = False) -> None:
    """
    Write data to a JSON file with standard pretty-printing.

    The data is written to a temporary file in the same directory and then
    moved over the target, so readers see either the old file or the new one.
    Non-JSON types (dates, Decimals) are serialized with ``str``.

    Args:
        filepath: Path to the JSON file
        data: Data to write to the file
        ensure_ascii: If True, escape non-ASCII characters (default: False)
        sort_keys: If True, sort dictionary keys (default: False)
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=filepath.parent,
        delete=False,
        prefix=f".{filepath.name}-",
        suffix=".tmp",
    ) as tmp_file:
        tmp_path = Path(tmp_file.name)
        try:
            json.dump(data, tmp_file, indent=2, ensure_ascii=ensure_ascii, sort_keys=sort_keys, default=str)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        except Exception:
            tmp_file.close()
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        tmp_path.replace(filepath)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def read_json(filepath: str | Path) -> Any:
    """
    Read data from a JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        The parsed JSON data
    """
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code-fence markers from model output.

    Example:
        strip_code_fences('```json\\n{"a": 1}\\n```') -> '{"a": 1}'
    """
    return _CODE_FENCE.sub("", text).strip()


def parse_json_object(text: str | None) -> dict[str, Any] | None:
    """
    Extract a single JSON object from free-form text.

    Tries the fence-stripped text first, then the outermost ``{...}`` span
    for responses that wrap the object in prose.

    Args:
        text: Raw text returned by the text-generation service

    Returns:
        Parsed dict, or None if no JSON object could be recovered
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    candidates = [cleaned]
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if 0 <= start < end:
        candidates.append(cleaned[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
        logger.debug("Model output parsed to %s, expected object", type(parsed).__name__)

    return None
