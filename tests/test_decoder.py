"""Tests for draftlog.decoder: text extraction from zipped document XML."""

import io
import logging
import zipfile

import pytest

from draftlog.decoder import (
    MISSING_CONTENT_PART,
    UNREADABLE_ARCHIVE,
    DocumentDecoder,
    decode_document,
    extract_text,
    unescape_entities,
)


def _zip(xml: str, part: str = "Doc.ulysses/Content.xml") -> bytes:
    """Zip *xml* as a document content part."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr(part, xml)
    return buf.getvalue()


# ── unescape_entities ───────────────────────────────────────────────


class TestUnescapeEntities:
    def test_predefined_entities(self):
        assert unescape_entities("&lt;a&gt; &quot;b&quot; &apos;c&apos;") == "<a> \"b\" 'c'"

    def test_single_pass(self):
        # &amp;lt; must become the literal text "&lt;", not "<"
        assert unescape_entities("&amp;lt;") == "&lt;"

    def test_unknown_entity_untouched(self):
        assert unescape_entities("&nbsp;") == "&nbsp;"


# ── extract_text ────────────────────────────────────────────────────


class TestExtractText:
    def test_paragraph_and_string_fragments(self):
        assert extract_text("<p>A &amp; B</p><string>C</string>") == "A & B\n\nC"

    def test_patterns_applied_in_order(self):
        xml = "<element>E</element><string>S</string><p>P</p>"
        assert extract_text(xml) == "P\n\nS\n\nE"

    def test_nested_markup_stripped(self):
        xml = '<p style="x">Hello <tag kind="strong">bold</tag> world</p>'
        assert extract_text(xml) == "Hello bold world"

    def test_multiline_paragraph(self):
        assert extract_text("<p>line one\nline two</p>") == "line one\nline two"

    def test_empty_fragments_dropped(self):
        assert extract_text("<p>  </p><p>kept</p><p></p>") == "kept"

    def test_unknown_elements_ignored(self):
        assert extract_text("<sheet><title>T</title><p>body</p></sheet>") == "body"

    def test_fallback_to_raw_prefix(self):
        xml = "<sheet>" + "x" * 50 + "</sheet>"
        assert extract_text(xml, fallback_chars=10) == xml[:10]

    def test_fallback_returns_whole_short_document(self):
        assert extract_text("<sheet/>") == "<sheet/>"


# ── DocumentDecoder ─────────────────────────────────────────────────


class TestDocumentDecoder:
    def test_decodes_content_part(self):
        data = _zip("<p>Hello</p><p>World</p>")
        assert DocumentDecoder().decode(data) == "Hello\n\nWorld"

    def test_content_part_found_by_suffix(self):
        data = _zip("<p>deep</p>", part="Some Bundle.ulysses/nested/Content.xml")
        assert decode_document(data) == "deep"

    def test_missing_content_part(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as archive:
            archive.writestr("Info.plist", "<plist/>")
        assert DocumentDecoder().decode(buf.getvalue()) == "Content.xml not found in archive"
        assert MISSING_CONTENT_PART.format(part="Content.xml") == "Content.xml not found in archive"

    def test_custom_content_part_named_in_diagnostic(self):
        data = _zip("<p>x</p>")
        assert DocumentDecoder(content_part="Body.xml").decode(data) == "Body.xml not found in archive"

    def test_not_a_zip(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="draftlog.decoder.decoder"):
            assert DocumentDecoder().decode(b"plain text, not a zip") == UNREADABLE_ARCHIVE
        assert "Could not open document archive" in caplog.text

    def test_empty_bytes(self):
        assert DocumentDecoder().decode(b"") == UNREADABLE_ARCHIVE

    def test_empty_content_part(self):
        assert DocumentDecoder().decode(_zip("")) == "Could not read Content.xml"

    def test_corrupt_content_part(self):
        # same length, different bytes: the stored CRC no longer matches
        data = _zip("<p>hello</p>").replace(b"<p>hello</p>", b"<p>jello</p>")
        assert DocumentDecoder().decode(data) == "Could not read Content.xml"

    def test_invalid_utf8_replaced(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as archive:
            archive.writestr("Content.xml", b"<p>caf\xff</p>")
        assert DocumentDecoder().decode(buf.getvalue()) == "caf\ufffd"

    def test_callable(self):
        decoder = DocumentDecoder()
        assert decoder(_zip("<p>x</p>")) == "x"

    @pytest.mark.parametrize("fallback", [1, 5])
    def test_fallback_chars_respected(self, fallback):
        data = _zip("<sheet>no text here</sheet>")
        assert DocumentDecoder(fallback_chars=fallback).decode(data) == "<sheet>"[:fallback]
