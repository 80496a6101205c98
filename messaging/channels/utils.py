"""Utility functions for decoding provider message payloads.

Gmail returns full messages as base64url-encoded RFC 822 bytes and message
timestamps as millisecond strings; these helpers turn both into Python values.
"""

import base64
import re
from datetime import datetime, timedelta, timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def decode_base64url(value: str) -> bytes:
    """Decode base64url data, tolerating stripped padding.

    Args:
    ----
        value: Base64url-encoded string as returned by the Gmail API

    Returns:
    -------
        Decoded bytes

    """
    if not value:
        return b""
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded)


def internal_date_to_datetime(internal_date: str) -> datetime:
    """Convert a millisecond epoch string to an aware UTC datetime.

    Raises
    ------
        ValueError: If ``internal_date`` is empty, not an integer or outside
            the range ``datetime`` can represent

    """
    if internal_date in (None, ""):
        raise ValueError("Message has no internal date")
    try:
        return EPOCH + timedelta(milliseconds=int(internal_date))
    except OverflowError as e:
        raise ValueError(f"Internal date out of range: {internal_date}") from e


def html_to_text(html_content: str) -> str:
    """Very small HTML-to-text fallback for messages without a plain part."""
    if not html_content:
        return ""
    text = re.sub(
        r"<(script|style)[^>]*>.*?</\1>", "", html_content, flags=re.DOTALL | re.IGNORECASE,
    )
    text = re.sub(r"<br\s*/?>|</p>|</div>", "\n", text, flags=re.IGNORECASE)
    text = _TAG_RE.sub("", text)
    return _BLANK_LINES_RE.sub("\n\n", text).strip()


def _first_address(mime_msg: EmailMessage, header_name: str) -> tuple[str, str]:
    header = mime_msg[header_name]
    addresses = getattr(header, "addresses", ()) if header is not None else ()
    if not addresses:
        return "", ""
    address = addresses[0]
    return address.addr_spec or "", address.display_name or ""


def _body_text(mime_msg: EmailMessage) -> str:
    part = mime_msg.get_body(preferencelist=("plain", "html"))
    if part is None:
        return ""
    try:
        content = part.get_content()
    except (LookupError, UnicodeDecodeError):
        # Unknown or lying charset declaration
        payload = part.get_payload(decode=True) or b""
        content = payload.decode("utf-8", errors="replace")
    if part.get_content_subtype() == "html":
        return html_to_text(content)
    return content


def parse_mime_message(raw_bytes: bytes) -> dict:
    """Parse raw RFC 822 bytes into the fields the sync engine stores.

    Args:
    ----
        raw_bytes: The decoded message source

    Returns:
    -------
        Dictionary with ``header_message_id``, ``subject``, ``from_handle``,
        ``from_display_name`` and ``text``

    """
    mime_msg = BytesParser(policy=policy.default).parsebytes(raw_bytes)
    from_handle, from_display_name = _first_address(mime_msg, "From")

    return {
        "header_message_id": str(mime_msg.get("Message-ID", "")).strip(),
        "subject": str(mime_msg.get("Subject", "")).strip(),
        "from_handle": from_handle,
        "from_display_name": from_display_name,
        "text": _body_text(mime_msg),
    }
