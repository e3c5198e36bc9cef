"""Document content helpers.

Extracted text lives in ``WorkspaceDocument.metadata["content"]``; these
helpers read and write it and map content types to MIME types.
"""

from typing import Any

CONTENT_KEY = "content"

_MIME_TYPES = {
    "text": "text/plain",
    "markdown": "text/markdown",
    "html": "text/html",
    "pdf": "application/pdf",
    "url": "text/uri-list",
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
}


def content_type_to_mime_type(content_type: str) -> str:
    """Map a document content type to a MIME type.

    Examples:
        content_type_to_mime_type("markdown") -> "text/markdown"
        content_type_to_mime_type("unknown") -> "application/octet-stream"
    """
    return _MIME_TYPES.get(content_type.lower(), "application/octet-stream")


def extract_content_from_metadata(metadata: dict[str, Any] | None) -> str:
    """Return the stored text content, or "" when absent or not a string."""
    if not metadata:
        return ""
    content = metadata.get(CONTENT_KEY)
    if isinstance(content, str):
        return content
    return ""


def store_content_in_metadata(metadata: dict[str, Any] | None, content: str) -> dict[str, Any]:
    """Return a copy of ``metadata`` with ``content`` stored under the content key."""
    updated = dict(metadata or {})
    updated[CONTENT_KEY] = content
    return updated
