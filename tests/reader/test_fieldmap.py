"""Tests for the pretty field-name table."""

import pytest

from journaltail.reader.fieldmap import PRETTY_FIELD_MAP, pretty_key


class TestPrettyKey:
    """Test pretty_key."""
    
    @pytest.mark.parametrize("name,expected", [
        ("MESSAGE", "message"),
        ("_PID", "pid"),
        ("_SYSTEMD_UNIT", "systemd_unit"),
        ("_SOURCE_REALTIME_TIMESTAMP", "source_realtime_timestamp"),
        ("_HOSTNAME", "hostname"),
    ])
    def test_known_fields(self, name, expected):
        """Test table lookups."""
        assert pretty_key(name) == expected
    
    def test_unknown_reserved_field(self):
        """Test fallback lowercases and strips leading underscores."""
        assert pretty_key("_SYSTEMD_INVOCATION_ID") == "systemd_invocation_id"
        assert pretty_key("__SEQNUM") == "seqnum"
    
    def test_unknown_user_field(self):
        """Test fallback for fields without a prefix."""
        assert pretty_key("REQUEST_ID") == "request_id"
    
    def test_inner_underscores_kept(self):
        """Test only the leading run is stripped."""
        assert pretty_key("_A__B_") == "a__b_"
    
    def test_custom_table(self):
        """Test an alternative table can be passed in."""
        assert pretty_key("MESSAGE", {"MESSAGE": "msg"}) == "msg"


class TestPrettyFieldMap:
    """Test the table itself."""
    
    def test_table_is_immutable(self):
        """Test the shared table cannot be modified at runtime."""
        with pytest.raises(TypeError):
            PRETTY_FIELD_MAP["MESSAGE"] = "text"
    
    def test_table_values_are_lowercase(self):
        """Test every mapped name is already in readable form."""
        for value in PRETTY_FIELD_MAP.values():
            assert value == value.lower()
            assert not value.startswith("_")
    
    def test_table_size(self):
        """Test the well-known set is complete."""
        assert len(PRETTY_FIELD_MAP) == 34
