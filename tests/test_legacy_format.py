"""Tests for the legacy property-list reader."""

import json
from datetime import UTC, datetime

from pantry.storage.legacy_format import dump_legacy, parse_legacy

UTF8_BOM = b"\xef\xbb\xbf"


class TestParseLegacy:
    """Tests for parse_legacy."""

    def test_xml_plist(self) -> None:
        data = dump_legacy({"expires": 1_700_000_000.0, "storage": {"value": 42}})
        assert parse_legacy(data) == {"expires": 1_700_000_000.0, "storage": {"value": 42}}

    def test_binary_plist(self) -> None:
        data = dump_legacy({"storage": [1, "two", 3.0, True]}, binary=True)
        assert parse_legacy(data) == {"storage": [1, "two", 3.0, True]}

    def test_json_is_not_legacy(self) -> None:
        data = json.dumps({"storage": 1}).encode("utf-8")
        assert parse_legacy(data) is None

    def test_corrupt_xml_is_not_legacy(self) -> None:
        assert parse_legacy(b"<?xml version='1.0'?><plist><dict><key>") is None

    def test_non_dictionary_root(self) -> None:
        assert parse_legacy(dump_legacy([1, 2, 3])) is None

    def test_plist_types_become_json_values(self) -> None:
        """Dates become timestamps and data becomes text."""
        data = dump_legacy({"storage": {"when": datetime(2020, 1, 1), "blob": b"hi"}})

        storage = parse_legacy(data)["storage"]
        assert storage["when"] == datetime(2020, 1, 1, tzinfo=UTC).timestamp()
        assert storage["blob"] == "hi"

    def test_xml_plist_with_byte_order_mark(self) -> None:
        data = UTF8_BOM + dump_legacy({"storage": {"value": 42}})
        assert parse_legacy(data) == {"storage": {"value": 42}}

    def test_dated_expiry_is_dropped(self) -> None:
        """A date under ``expires`` is not a timestamp, so the entry never expires."""
        data = dump_legacy({"expires": datetime(2000, 1, 1), "storage": {"value": 1}})
        assert parse_legacy(data) == {"storage": {"value": 1}}

    def test_deeply_nested_plist_is_not_legacy(self) -> None:
        """Nesting beyond the recursion limit is rejected instead of raising."""
        data = (
            b'<?xml version="1.0" encoding="UTF-8"?><plist version="1.0"><dict>'
            b"<key>storage</key>" + b"<array>" * 5000 + b"</array>" * 5000 + b"</dict></plist>"
        )
        assert parse_legacy(data) is None
