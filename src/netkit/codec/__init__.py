r"""JSON codec collaborator: typed (de)serialization of payloads."""

from __future__ import annotations

__all__ = ["DEFAULT_DATE_PATTERN", "DateFormatter", "HTTPResults", "JSONCodec"]

from netkit.codec.dates import DEFAULT_DATE_PATTERN, DateFormatter
from netkit.codec.json_codec import JSONCodec
from netkit.codec.results import HTTPResults
