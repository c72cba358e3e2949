#!/usr/bin/env python3
"""Tests for Gmail MIME payload helpers."""

import base64

import pytest

from subscan.gmail.mime import (
    decode_body_data,
    decode_header_text,
    extract_body_text,
    find_part,
    header_value,
    html_to_text,
)


def encode(text: str) -> str:
    """URL-safe base64 without padding, as Gmail sends it."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def part(mime_type: str, text: str | None = None, parts: list | None = None) -> dict:
    result: dict = {"mimeType": mime_type, "body": {"data": encode(text)} if text is not None else {"size": 0}}
    if parts is not None:
        result["parts"] = parts
    return result


@pytest.mark.gmail
class TestHeaders:
    """Test header lookup and decoding."""

    def test_header_value_is_case_insensitive(self):
        """Test header names match regardless of case."""
        headers = [{"name": "SUBJECT", "value": "Hello"}, {"name": "Date", "value": "today"}]
        assert header_value(headers, "Subject") == "Hello"
        assert header_value(headers, "from") is None
        assert header_value(None, "Subject") is None

    def test_decode_plain_header(self):
        """Test unencoded headers pass through."""
        assert decode_header_text("Your receipt") == "Your receipt"
        assert decode_header_text("") == ""

    def test_decode_quoted_printable_header(self):
        """Test Q-encoded words are decoded."""
        assert decode_header_text("=?utf-8?Q?Caf=C3=A9_receipt?=") == "Café receipt"


@pytest.mark.gmail
class TestBodyDecoding:
    """Test body data decoding and part selection."""

    def test_decode_unpadded_base64(self):
        """Test Gmail's unpadded URL-safe base64."""
        assert decode_body_data(encode("Total: €9.99?")) == "Total: €9.99?"

    def test_decode_empty(self):
        """Test empty data."""
        assert decode_body_data("") == ""

    def test_find_part_recurses(self):
        """Test nested multipart trees are searched depth first."""
        payload = part(
            "multipart/mixed",
            parts=[
                part("multipart/alternative", parts=[part("text/html", "<p>hi</p>"), part("text/plain", "hi")]),
                part("text/plain", "attachment text"),
            ],
        )
        found = find_part(payload, "text/plain")
        assert found is not None
        assert decode_body_data(found["body"]["data"]) == "hi"

    def test_find_part_skips_empty_bodies(self):
        """Test parts without data are ignored."""
        payload = part("multipart/alternative", parts=[part("text/plain"), part("text/plain", "second")])
        assert decode_body_data(find_part(payload, "text/plain")["body"]["data"]) == "second"

    def test_single_part_message(self):
        """Test a payload that is itself the text part."""
        assert extract_body_text(part("text/plain", "Thanks for your payment"), 1500) == "Thanks for your payment"


@pytest.mark.gmail
class TestExtractBodyText:
    """Test plain-text body extraction."""

    def test_plain_text_preferred_over_html(self):
        """Test the text/plain alternative wins."""
        payload = part(
            "multipart/alternative",
            parts=[part("text/html", "<b>HTML version</b>"), part("text/plain", "Plain version")],
        )
        assert extract_body_text(payload, 1500) == "Plain version"

    def test_html_only_flattened(self):
        """Test HTML-only messages are converted to text."""
        html = "<html><head><style>p{}</style></head><body><p>Total:</p><p>$15.99</p><script>x()</script></body></html>"
        payload = part("multipart/alternative", parts=[part("text/html", html)])
        assert extract_body_text(payload, 1500) == "Total: $15.99"

    def test_no_text_parts(self):
        """Test messages with no text parts give an empty body."""
        payload = part("multipart/mixed", parts=[part("image/png", "binary")])
        assert extract_body_text(payload, 1500) == ""
        assert extract_body_text(None, 1500) == ""

    def test_truncation(self):
        """Test bodies are truncated to the limit."""
        assert extract_body_text(part("text/plain", "abcdef"), 3) == "abc"

    def test_html_to_text_normalizes_whitespace(self):
        """Test whitespace runs collapse to single spaces."""
        assert html_to_text("<div>  Netflix \n\n <span>Standard</span></div>") == "Netflix Standard"
