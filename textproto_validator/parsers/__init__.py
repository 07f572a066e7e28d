"""Parsers for the textproto header comments."""

from .header_parser import DirectivePair, extract_headers, PROTO_FILE_KEY, PROTO_MESSAGE_KEY

__all__ = ["DirectivePair", "extract_headers", "PROTO_FILE_KEY", "PROTO_MESSAGE_KEY"]
