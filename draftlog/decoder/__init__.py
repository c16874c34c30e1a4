"""Document decoding subsystem."""

from draftlog.decoder.decoder import (
    MISSING_CONTENT_PART,
    UNREADABLE_ARCHIVE,
    UNREADABLE_CONTENT_PART,
    DocumentDecoder,
    decode_document,
    extract_text,
    unescape_entities,
)

__all__ = [
    "DocumentDecoder",
    "MISSING_CONTENT_PART",
    "UNREADABLE_ARCHIVE",
    "UNREADABLE_CONTENT_PART",
    "decode_document",
    "extract_text",
    "unescape_entities",
]
