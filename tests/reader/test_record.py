"""Tests for record normalization."""

from journaltail.reader.record import (
    DECODE_FAILURE_TAG,
    JournalEntry,
    build_record,
    decode_value,
)
from journaltail.source.base import RawEntry


def make_entry(**fields):
    return RawEntry(fields=fields, realtime_usec=1_700_000_000_250_000)


class TestDecodeValue:
    """Test decode_value."""
    
    def test_ascii_bytes(self):
        """Test plain bytes decode to text."""
        assert decode_value(b"hello") == ("hello", True)
    
    def test_non_utf8_bytes(self):
        """Test invalid UTF-8 never fails and keeps one char per byte."""
        value, ok = decode_value(b"caf\xe9 \xff")
        
        assert ok
        assert value == "café ÿ"
        assert len(value) == 6
    
    def test_repeated_field(self):
        """Test a list of values decodes element-wise."""
        assert decode_value([b"a", b"b"]) == (["a", "b"], True)
    
    def test_text_passthrough(self):
        """Test already decoded text is kept."""
        assert decode_value("done") == ("done", True)
    
    def test_unexpected_type(self):
        """Test other types are stringified and flagged."""
        assert decode_value(42) == ("42", False)


class TestJournalEntry:
    """Test JournalEntry."""
    
    def test_raw_keys(self):
        """Test keys pass through unchanged without pretty keys."""
        entry = JournalEntry(make_entry(MESSAGE=b"started", _PID=b"12"))
        
        record = entry.to_record(pretty=False)
        
        assert record == {"MESSAGE": "started", "_PID": "12"}
    
    def test_pretty_keys(self):
        """Test reserved names map to readable ones."""
        entry = JournalEntry(make_entry(
            MESSAGE=b"started",
            _PID=b"12",
            _SYSTEMD_SLICE=b"system.slice",
        ))
        
        record = entry.to_record(pretty=True)
        
        assert record == {
            "message": "started",
            "pid": "12",
            "systemd_slice": "system.slice",
        }
    
    def test_realtime_timestamp(self):
        """Test the timestamp is in seconds."""
        entry = JournalEntry(make_entry())
        
        assert entry.realtime_timestamp == 1_700_000_000.25
    
    def test_hostname(self):
        """Test the entry hostname is decoded."""
        assert JournalEntry(make_entry(_HOSTNAME=b"web-1")).hostname == "web-1"
        assert JournalEntry(make_entry()).hostname is None
    
    def test_decode_failure_tags_record(self):
        """Test an undecodable value is kept and the record tagged."""
        entry = JournalEntry(make_entry(MESSAGE=b"ok", ODD=3.5))
        
        record = entry.to_record(pretty=False)
        
        assert record["ODD"] == "3.5"
        assert record["tags"] == [DECODE_FAILURE_TAG]


class TestBuildRecord:
    """Test build_record."""
    
    def test_metadata_fields(self):
        """Test timestamp, host and cursor are merged in."""
        record = build_record(
            make_entry(MESSAGE=b"hello"),
            cursor="s=1;i=2",
            default_host="local",
        )
        
        assert record == {
            "MESSAGE": "hello",
            "timestamp": 1_700_000_000.25,
            "host": "local",
            "cursor": "s=1;i=2",
        }
    
    def test_entry_host_wins(self):
        """Test the entry's own hostname beats the local one."""
        record = build_record(
            make_entry(_HOSTNAME=b"db-3"),
            cursor="c",
            default_host="local",
        )
        
        assert record["host"] == "db-3"
    
    def test_pretty_keys_with_metadata(self):
        """Test pretty names and metadata together."""
        record = build_record(
            make_entry(MESSAGE=b"hello", _HOSTNAME=b"db-3"),
            cursor="c",
            default_host="local",
            pretty_keys=True,
        )
        
        assert record["message"] == "hello"
        assert record["hostname"] == "db-3"
        assert record["host"] == "db-3"
