"""
Tests for display conversions used by the CLI listings.
"""
import time

from amduplicates.utils.convert_utils import ConvertUtils


class TestBytesToHuman:

    def test_bytes(self):
        assert ConvertUtils.bytes_to_human(0) == "0.00B"
        assert ConvertUtils.bytes_to_human(512) == "512.00B"

    def test_binary_units(self):
        assert ConvertUtils.bytes_to_human(1024) == "1.00KB"
        assert ConvertUtils.bytes_to_human(1536) == "1.50KB"
        assert ConvertUtils.bytes_to_human(1024 * 1024) == "1.00MB"
        assert ConvertUtils.bytes_to_human(5 * 1024 ** 3) == "5.00GB"

    def test_negative_is_zero(self):
        assert ConvertUtils.bytes_to_human(-1) == "0B"


class TestTimestampToHuman:

    def test_formats_local_time(self):
        ts = time.mktime((2024, 3, 15, 10, 30, 0, 0, 0, -1))
        assert ConvertUtils.timestamp_to_human(ts) == "2024-03-15 10:30:00"

    def test_custom_format(self):
        ts = time.mktime((2024, 3, 15, 10, 30, 0, 0, 0, -1))
        assert ConvertUtils.timestamp_to_human(ts, "%Y") == "2024"

    def test_out_of_range(self):
        assert ConvertUtils.timestamp_to_human(1e20) == "Invalid timestamp"


def test_short_digest():
    digest = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert ConvertUtils.short_digest(digest) == "e3b0c44298fc"
    assert ConvertUtils.short_digest(digest, 4) == "e3b0"
    assert ConvertUtils.short_digest("Error") == "Error"
