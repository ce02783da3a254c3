# =============================================================================
# STAGE3 LISTING PARSER TESTS
# =============================================================================
# Tests for latest-stage3.txt parsing.
# =============================================================================

import re

import pytest

from stage3_dl.core.errors import ParseError, ParseKind
from stage3_dl.core.listing import ENTRY_RE, parse_line, parse_listing


class TestParseListing:
    """Test parse_listing on realistic and degenerate documents."""

    def test_single_line_entry_fields(self):
        """One data line yields filename, date, size and timestamp."""
        text = "20240615T170014Z/stage3-amd64-20240615T170014Z.tar.xz 274382931 ..."
        entries = parse_listing(text)

        assert len(entries) == 1
        e = entries[0]
        assert e.remote_path == "20240615T170014Z/stage3-amd64-20240615T170014Z.tar.xz"
        assert e.filename == "stage3-amd64-20240615T170014Z.tar.xz"
        assert e.date == "2024-06-15"
        assert e.build_timestamp == "2024-06-15T17:00:14Z"
        assert e.size_bytes == 274382931
        assert e.size_mb == pytest.approx(261.65, abs=0.05)
        assert e.size_mb == 261.67

    def test_signed_document_skips_armor_and_comments(self, sample_listing):
        """PGP armor, Hash header, comments and signature body are ignored."""
        entries = parse_listing(sample_listing)

        assert [e.filename for e in entries] == [
            "stage3-amd64-openrc-20240615T170014Z.tar.xz",
            "stage3-amd64-systemd-20240609T164903Z.tar.xz",
            "stage3-amd64-desktop-openrc-20240615T170014Z.tar.xz",
        ]

    def test_order_is_preserved_and_paths_match(self, sample_listing):
        """Entries keep input order and every remote path matches the record pattern."""
        entries = parse_listing(sample_listing)
        data_lines = [ln.split()[0] for ln in sample_listing.splitlines() if ENTRY_RE.match(ln)]

        assert [e.remote_path for e in entries] == data_lines
        for e in entries:
            assert re.match(r"^\d{8}T\d{6}Z/stage3-\S+$", e.remote_path)

    def test_non_matching_lines_are_dropped(self):
        """Lines that are not stage3 records are silently excluded."""
        text = (
            "20240615T170014Z/install-amd64-minimal-20240615T170014Z.iso 123\n"
            "garbage line here\n"
            "20240615T170014Z/stage3-arm64-20240615T170014Z.tar.xz 42\n"
        )
        entries = parse_listing(text)

        assert [e.filename for e in entries] == ["stage3-arm64-20240615T170014Z.tar.xz"]

    def test_crlf_line_endings(self):
        """Windows line endings do not leak into fields."""
        entries = parse_listing("20240615T170014Z/stage3-x86-20240615T170014Z.tar.xz 1048576\r\n")

        assert entries[0].filename == "stage3-x86-20240615T170014Z.tar.xz"
        assert entries[0].size_mb == 1.0

    def test_label(self):
        """Display label mirrors the menu format."""
        e = parse_listing("20240615T170014Z/stage3-x86-20240615T170014Z.tar.xz 1048576")[0]

        assert e.label == "stage3-x86-20240615T170014Z.tar.xz [1.00 MB|2024-06-15]"

    @pytest.mark.parametrize("text", ["", "# just comments\n", "\n\n-----BEGIN PGP SIGNATURE-----\n"])
    def test_empty_result_raises(self, text):
        """Documents without records fail with EMPTY_RESULT."""
        with pytest.raises(ParseError) as exc:
            parse_listing(text)
        assert exc.value.kind is ParseKind.EMPTY_RESULT


class TestParseLine:
    """Test single-line parsing."""

    def test_missing_size_column(self):
        """A record without a numeric size is not usable."""
        assert parse_line("20240615T170014Z/stage3-amd64-20240615T170014Z.tar.xz") is None
        assert parse_line("20240615T170014Z/stage3-amd64-20240615T170014Z.tar.xz big") is None

    def test_comment_that_looks_like_record(self):
        """Comment prefix wins over the record pattern."""
        assert parse_line("#20240615T170014Z/stage3-amd64.tar.xz 10") is None

    def test_entries_are_immutable(self):
        """ListingEntry is frozen."""
        e = parse_line("20240615T170014Z/stage3-amd64-20240615T170014Z.tar.xz 10")
        with pytest.raises(Exception):
            e.size_bytes = 11

    def test_non_ascii_digits_are_not_a_size(self):
        """Unicode digits like superscript two are rejected, not passed to int()."""
        line = "20240615T170014Z/stage3-amd64-x.tar.xz ²"
        assert parse_line(line) is None
        with pytest.raises(ParseError) as exc:
            parse_listing(line + "\n")
        assert exc.value.kind is ParseKind.EMPTY_RESULT

    def test_non_ascii_digits_in_stamp(self):
        """Fullwidth digits in the build stamp do not match the record pattern."""
        assert parse_line("２０240615T170014Z/stage3-amd64-x.tar.xz 10") is None
