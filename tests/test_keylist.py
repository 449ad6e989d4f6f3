"""
Tests for keylist rendering, parsing, and file helpers.
"""

import pytest

from keyscrub.core.domain import KeyEntry, KeyTable, SanitizedRecord
from keyscrub.core.exceptions import InputError
from keyscrub.service.keylist import (
    parse_keylist,
    read_keylist,
    recover_label,
    render_keylist,
    write_keylist,
)


@pytest.fixture
def table():
    return KeyTable(
        [
            KeyEntry("Hostname1", "\\\\server1\\share\\", "Hostname"),
            KeyEntry("Address1", "10.0.0.5", "Address"),
            KeyEntry("Username1", "CORP\\j smith", "Username"),
        ]
    )


@pytest.fixture
def records():
    return [
        SanitizedRecord(output_path="/out/a_sanitized.log", timestamp="2024-03-01 12:30:00"),
        SanitizedRecord(output_path="/out/b_sanitized.log", timestamp="2024-03-01 12:30:01"),
    ]


class TestRenderKeylist:
    """Test suite for the persisted keylist format."""

    def test_exact_format(self, table, records):
        text = render_keylist("Keylist 2024-03-01", table, records)

        assert text == (
            "Keylist 2024-03-01\n"
            "Hostname1 \\\\server1\\share\\\n"
            "Address1 10.0.0.5\n"
            "Username1 CORP\\j smith\n"
            "List of files using this Key:\n"
            "2024-03-01 12:30:00 - /out/a_sanitized.log\n"
            "2024-03-01 12:30:01 - /out/b_sanitized.log\n"
        )

    def test_without_banner(self, table):
        text = render_keylist("", table, [])

        assert text.splitlines()[0] == "Hostname1 \\\\server1\\share\\"
        assert text.splitlines()[-1] == "List of files using this Key:"


class TestParseKeylist:
    """Test suite for reading keylists back as seed tables."""

    def test_round_trip(self, table, records):
        text = render_keylist("Line one\nLine two", table, records)

        parsed, parsed_records = parse_keylist(
            text, banner_lines=2, labels=["Hostname", "Address", "Username"]
        )

        assert parsed == table
        assert parsed_records == records

    def test_values_with_spaces_are_kept_whole(self, table):
        parsed, _ = parse_keylist(render_keylist("", table, []), banner_lines=0)

        assert parsed.get("Username1").original_value == "CORP\\j smith"

    def test_missing_header_is_rejected(self):
        with pytest.raises(ValueError):
            parse_keylist("banner\nAddress1 10.0.0.1\n")

    def test_key_line_without_value_is_rejected(self):
        with pytest.raises(ValueError):
            parse_keylist("banner\nAddress1\nList of files using this Key:\n")

    def test_duplicate_placeholder_is_rejected(self):
        text = "banner\nAddress1 10.0.0.1\nAddress1 10.0.0.2\nList of files using this Key:\n"

        with pytest.raises(ValueError):
            parse_keylist(text)

    def test_banner_is_found_without_a_line_count(self, table, records):
        text = render_keylist("Keylist for run 2024-03-01\nCustomer: ACME", table, records)

        parsed, parsed_records = parse_keylist(text)

        assert parsed == table
        assert parsed_records == records

    def test_default_banner_and_no_banner(self, table):
        with_default = render_keylist("keyscrub keylist generated 2024-03-01", table, [])
        without = render_keylist("", table, [])

        assert parse_keylist(with_default)[0] == table
        assert parse_keylist(without)[0] == table

    def test_empty_table_after_banner(self):
        parsed, _ = parse_keylist("Keylist\nList of files using this Key:\n")

        assert len(parsed) == 0


class TestRecoverLabel:
    """Test suite for label recovery from persisted placeholders."""

    def test_known_label_wins(self):
        assert recover_label("IPv41", ["IPv", "IPv4"]) == "IPv4"

    def test_falls_back_to_stripping_digits(self):
        assert recover_label("Hostname12") == "Hostname"

    def test_name_without_digits(self):
        assert recover_label("Gateway") == "Gateway"


class TestKeylistFiles:
    """Test suite for keylist file helpers."""

    def test_write_then_read(self, tmp_path, table, records):
        path = write_keylist(tmp_path / "keylist.txt", "Keylist", table, records)

        assert read_keylist(path, banner_lines=1, labels=["Address", "Hostname"]) == table

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(InputError):
            read_keylist(tmp_path / "missing.txt")

    def test_read_malformed_file(self, tmp_path):
        path = tmp_path / "keylist.txt"
        path.write_text("banner\nno header here\n", encoding="utf-8")

        with pytest.raises(InputError):
            read_keylist(path)

    def test_write_to_missing_directory(self, tmp_path, table):
        with pytest.raises(InputError):
            write_keylist(tmp_path / "nope" / "keylist.txt", "", table, [])

    def test_read_keylist_written_under_another_banner(self, tmp_path, table, records):
        path = write_keylist(
            tmp_path / "keylist.txt", "Old banner\nsecond line\nthird line", table, records
        )

        assert read_keylist(path, labels=["Address", "Hostname", "Username"]) == table
