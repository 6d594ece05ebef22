"""
Normalization of raw journal entries into downstream records.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from journaltail.reader.fieldmap import PRETTY_FIELD_MAP, pretty_key
from journaltail.source.base import RawEntry
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

DECODE_FAILURE_TAG = "_journaldecodefailure"

# Journal field bytes carry no encoding guarantee. ISO-8859-1 maps every
# byte to a code point, so decoding never fails and never loses data.
FIELD_ENCODING = "iso-8859-1"


def decode_value(value: Any) -> Tuple[Any, bool]:
    """
    Turn a raw field value into text.

    Args:
        value: Bytes, a list of bytes for a repeated field, or text

    Returns:
        Tuple of (decoded value, whether decoding was clean)
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(FIELD_ENCODING), True
    if isinstance(value, str):
        return value, True
    if isinstance(value, (list, tuple)):
        decoded = [decode_value(v) for v in value]
        return [v for v, _ in decoded], all(ok for _, ok in decoded)
    return str(value), False


class JournalEntry:
    """
    Wraps a RawEntry with the record conversion this project applies.

    Example:
        entry = JournalEntry(source.current_entry())
        record = entry.to_record(pretty=True)
        record["message"]
    """

    def __init__(
        self,
        raw: RawEntry,
        field_map: Mapping[str, str] = PRETTY_FIELD_MAP,
    ):
        self.raw = raw
        self.field_map = field_map

    @property
    def realtime_timestamp(self) -> float:
        """Wall-clock time of the entry in seconds since the epoch."""
        return self.raw.realtime_usec / 1_000_000

    @property
    def hostname(self) -> Optional[str]:
        """Origin host recorded in the entry, if any."""
        value = self.raw.hostname
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            return None
        decoded, _ = decode_value(value)
        return decoded or None

    def to_record(self, pretty: bool) -> Dict[str, Any]:
        """
        Convert the entry's fields to a record.

        Args:
            pretty: Rename fields per the pretty-name table

        Returns:
            Field name to text value (a list for repeated fields). A
            ``tags`` list holding DECODE_FAILURE_TAG is added when some
            value had an unexpected type and was rendered with str().
        """
        record: Dict[str, Any] = {}
        failed: List[str] = []

        for name, value in self.raw.fields.items():
            key = pretty_key(name, self.field_map) if pretty else name
            decoded, ok = decode_value(value)
            if not ok:
                failed.append(name)
            record[key] = decoded

        if failed:
            logger.warning("Journal fields had undecodable values", fields=failed)
            tags = record.get("tags")
            if not isinstance(tags, list):
                tags = [tags] if tags else []
            record["tags"] = tags + [DECODE_FAILURE_TAG]

        return record


def build_record(
    raw: RawEntry,
    cursor: str,
    default_host: str,
    pretty_keys: bool = False,
    field_map: Mapping[str, str] = PRETTY_FIELD_MAP,
) -> Dict[str, Any]:
    """
    Build the full downstream record for one entry.

    Args:
        raw: Entry read from the source
        cursor: Reader position after consuming the entry
        default_host: Host to use when the entry names none
        pretty_keys: Rename fields per the pretty-name table
        field_map: Pretty-name table

    Returns:
        Normalized fields plus ``timestamp``, ``host`` and ``cursor``
    """
    entry = JournalEntry(raw, field_map)
    record = entry.to_record(pretty_keys)
    record.update(
        timestamp=entry.realtime_timestamp,
        host=entry.hostname or default_host,
        cursor=cursor,
    )
    return record


__all__ = [
    "DECODE_FAILURE_TAG",
    "JournalEntry",
    "build_record",
    "decode_value",
]
