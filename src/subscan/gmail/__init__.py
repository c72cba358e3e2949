"""
Gmail Message Fetching Package

Pull-based retrieval of candidate billing messages from a connected Gmail
mailbox via the Gmail REST API.

Key Components:
- fetcher: keyword/date search, concurrent payload fetch, RawMessage model
- mime: MIME part-tree walking, base64url decoding, HTML flattening
"""

from .fetcher import NO_SUBJECT, GmailFetcher, RawMessage, build_search_query
from .mime import decode_body_data, extract_body_text, find_part, header_value

__all__ = [
    "NO_SUBJECT",
    "GmailFetcher",
    "RawMessage",
    "build_search_query",
    "decode_body_data",
    "extract_body_text",
    "find_part",
    "header_value",
]
