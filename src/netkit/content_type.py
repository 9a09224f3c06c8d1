r"""Content type tags derived from MIME type strings."""

from __future__ import annotations

__all__ = ["HTTPContentType"]

from enum import Enum


class HTTPContentType(Enum):
    r"""Content type of a request body or a response.

    Example:
        ```pycon
        >>> from netkit.content_type import HTTPContentType
        >>> HTTPContentType.from_mime_type("application/json; charset=utf-8")
        <HTTPContentType.JSON: 'application/json'>
        >>> HTTPContentType.from_mime_type(None)
        <HTTPContentType.UNKNOWN: 'unknown'>
        >>> HTTPContentType.XML.mime_type
        'text/xml'

        ```
    """

    URLENCODED = "application/x-www-form-urlencoded"
    JSON = "application/json"
    XML = "text/xml"
    HTML = "text/html"
    TEXT = "text/plain"
    UNKNOWN = "unknown"

    @classmethod
    def from_mime_type(cls, mime_type: str | None) -> HTTPContentType:
        """Derive the content type from a MIME type string.

        Matching is case-insensitive and tolerates parameters such as
        ``charset``.

        Args:
            mime_type: The MIME type, typically the ``Content-Type``
                header value.

        Returns:
            The matching content type, ``UNKNOWN`` otherwise.
        """
        if mime_type is None:
            return cls.UNKNOWN
        lowered = mime_type.lower()
        for content_type, markers in _MIME_MARKERS:
            if any(marker in lowered for marker in markers):
                return content_type
        return cls.UNKNOWN

    @property
    def mime_type(self) -> str:
        """The MIME type sent in the ``Content-Type`` header."""
        return self.value


# Order matters: the first matching entry wins.
_MIME_MARKERS: tuple[tuple[HTTPContentType, tuple[str, ...]], ...] = (
    (HTTPContentType.URLENCODED, ("application/x-www-form-urlencoded",)),
    (HTTPContentType.JSON, ("application/json",)),
    (HTTPContentType.XML, ("text/xml", "application/xml")),
    (HTTPContentType.HTML, ("text/html",)),
    (HTTPContentType.TEXT, ("text/plain",)),
)
