"""Attachment URL policy shared by the import parsers."""

from __future__ import annotations

from urllib.parse import urlsplit

from quizport.domain.imports.errors import FormatError


def validate_attachment_url(url: str | None, *, host: str) -> str | None:
    """Return ``url`` trimmed, or ``None`` when blank.

    Raises ``FormatError`` naming the violation when the URL is not https or
    does not point at ``host``.
    """

    if url is None or not url.strip():
        return None
    candidate = url.strip()
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
    except ValueError as exc:
        raise FormatError("attachmentUrl must be a valid URL") from exc
    if parts.scheme.lower() != "https":
        raise FormatError("attachmentUrl must use https")
    if hostname is None or hostname.lower() != host.lower():
        raise FormatError(f"attachmentUrl must use host {host}")
    return candidate
