#!/usr/bin/env python3
"""
Gmail MIME Payload Helpers

Walks the Gmail API ``payload`` part tree and turns it into plain text.

The Gmail API returns message bodies as a nested tree of parts, each with a
``mimeType``, optional ``headers`` and a ``body`` whose ``data`` is URL-safe
base64. Multipart containers carry their children in ``parts``.
"""

import base64
import binascii
import email.header
import logging
from typing import Any

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def header_value(headers: list[dict[str, str]] | None, name: str) -> str | None:
    """
    Find a header value by case-insensitive name.

    Args:
        headers: Gmail ``payload.headers`` list of {"name", "value"} dicts
        name: Header name, e.g. "Subject"

    Returns:
        First matching value, or None
    """
    wanted = name.lower()
    for header in headers or []:
        if str(header.get("name", "")).lower() == wanted:
            return header.get("value")
    return None


def decode_header_text(header: str) -> str:
    """Decode an RFC 2047 encoded header with proper charset handling."""
    if not header:
        return ""

    try:
        decoded_parts = []
        for part, encoding in email.header.decode_header(header):
            if isinstance(part, bytes):
                decoded_parts.append(part.decode(encoding or "utf-8", errors="ignore"))
            else:
                decoded_parts.append(str(part))
        return "".join(decoded_parts)
    except (LookupError, ValueError) as e:
        logger.warning(f"Error decoding header {header!r}: {e}")
        return header


def decode_body_data(data: str) -> str:
    """
    Decode a Gmail body ``data`` field.

    Gmail uses URL-safe base64 and frequently omits padding.

    Returns:
        Decoded UTF-8 text; empty string if the data is corrupt
    """
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Undecodable body data: {e}")
        return ""
    return raw.decode("utf-8", errors="ignore")


def find_part(payload: dict[str, Any] | None, mime_type: str) -> dict[str, Any] | None:
    """
    Depth-first search for the first part of a MIME type that carries data.

    Args:
        payload: Gmail payload or sub-part
        mime_type: e.g. "text/plain"

    Returns:
        The matching part dict, or None
    """
    if not payload:
        return None

    if payload.get("mimeType") == mime_type and (payload.get("body") or {}).get("data"):
        return payload

    for part in payload.get("parts") or []:
        found = find_part(part, mime_type)
        if found is not None:
            return found

    return None


def html_to_text(html: str) -> str:
    """Flatten an HTML body to whitespace-normalized text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    return " ".join(soup.get_text(" ").split())


def extract_body_text(payload: dict[str, Any] | None, max_length: int) -> str:
    """
    Extract the message body as plain text, truncated to ``max_length``.

    The first ``text/plain`` part wins. Messages with only an HTML body
    fall back to the first ``text/html`` part, flattened to text.
    """
    plain_part = find_part(payload, "text/plain")
    if plain_part is not None:
        text = decode_body_data(plain_part["body"]["data"])
    else:
        html_part = find_part(payload, "text/html")
        text = html_to_text(decode_body_data(html_part["body"]["data"])) if html_part else ""

    return text[:max_length]
