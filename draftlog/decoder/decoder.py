"""Document decoder: pulls visible text out of a zipped XML content part."""

from __future__ import annotations

import io
import logging
import re
import zipfile

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_PART = "Content.xml"
DEFAULT_FALLBACK_CHARS = 1000

UNREADABLE_ARCHIVE = "Unable to parse document archive"
MISSING_CONTENT_PART = "{part} not found in archive"
UNREADABLE_CONTENT_PART = "Could not read {part}"

# Applied in order; each match contributes one fragment.
_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<p\b[^>]*>(.*?)</p>", re.DOTALL),
    re.compile(r"<string\b[^>]*>(.*?)</string>", re.DOTALL),
    re.compile(r"<element\b[^>]*>(.*?)</element>", re.DOTALL),
)

_TAG_RE = re.compile(r"<[^>]+>")

_ENTITIES: dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}
_ENTITY_RE = re.compile(r"&(lt|gt|amp|quot|apos);")


def unescape_entities(text: str) -> str:
    """Replace the five predefined XML entities in a single pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], text)


def extract_text(xml: str, fallback_chars: int = DEFAULT_FALLBACK_CHARS) -> str:
    """Extract human-visible text fragments from document XML.

    Unknown elements are ignored. When nothing matches, the first
    ``fallback_chars`` characters of the raw XML are returned instead.
    """
    fragments: list[str] = []
    for pattern in _TEXT_PATTERNS:
        for match in pattern.finditer(xml):
            text = unescape_entities(_TAG_RE.sub("", match.group(0))).strip()
            if text:
                fragments.append(text)

    joined = "\n\n".join(fragments).strip()
    return joined or xml[:fallback_chars]


class DocumentDecoder:
    """Decodes raw document bytes to text. Never raises."""

    def __init__(
        self,
        content_part: str = DEFAULT_CONTENT_PART,
        fallback_chars: int = DEFAULT_FALLBACK_CHARS,
    ) -> None:
        self.content_part = content_part
        self.fallback_chars = fallback_chars

    def __call__(self, data: bytes) -> str:
        return self.decode(data)

    def decode(self, data: bytes) -> str:
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except Exception:
            logger.debug("Could not open document archive", exc_info=True)
            return UNREADABLE_ARCHIVE

        with archive:
            # The content part may sit under a varying bundle folder
            entry = next(
                (n for n in archive.namelist() if n.endswith(self.content_part)),
                None,
            )
            if entry is None:
                return MISSING_CONTENT_PART.format(part=self.content_part)
            try:
                raw = archive.read(entry)
            except Exception:
                logger.debug("Could not read %s", entry, exc_info=True)
                return UNREADABLE_CONTENT_PART.format(part=self.content_part)

        xml = raw.decode("utf-8", errors="replace")
        if not xml:
            return UNREADABLE_CONTENT_PART.format(part=self.content_part)
        return extract_text(xml, self.fallback_chars)


def decode_document(
    data: bytes,
    content_part: str = DEFAULT_CONTENT_PART,
    fallback_chars: int = DEFAULT_FALLBACK_CHARS,
) -> str:
    """Convenience wrapper around DocumentDecoder.decode()."""
    return DocumentDecoder(content_part, fallback_chars).decode(data)
