"""Tests for the background checkpoint scheduler."""

import time

from journaltail.position.checkpoint import CheckpointScheduler
from journaltail.position.store import CursorStore, CursorStoreError


class FailingStore(CursorStore):
    """Store whose first flush attempts fail."""
    
    def __init__(self, path, failures):
        super().__init__(path)
        self.remaining_failures = failures
    
    def flush_if_changed(self) -> bool:
        if self.remaining_failures > 0:
            self.remaining_failures -= 1
            raise CursorStoreError("disk unavailable")
        return super().flush_if_changed()


class TestCheckpointScheduler:
    """Test CheckpointScheduler."""
    
    def test_creation(self, sincedb_path):
        """Test creating a scheduler."""
        scheduler = CheckpointScheduler(CursorStore(sincedb_path), interval=2)
        
        assert scheduler.interval == 2
        assert not scheduler.is_running
    
    def test_periodic_flush(self, sincedb_path):
        """Test an advanced cursor is persisted after an interval."""
        store = CursorStore(sincedb_path)
        store.load()
        store.advance("cursor-1")
        
        scheduler = CheckpointScheduler(store, interval=0.05)
        scheduler.start()
        
        time.sleep(0.2)
        
        scheduler.stop()
        
        assert store.persisted_value() == "cursor-1"
        assert sincedb_path.read_text() == "cursor-1\n"
        assert scheduler.flushes == 1
    
    def test_unchanged_cursor_not_rewritten(self, sincedb_path):
        """Test idle ticks do not touch the file."""
        store = CursorStore(sincedb_path)
        store.load()
        
        scheduler = CheckpointScheduler(store, interval=0.02)
        scheduler.start()
        time.sleep(0.15)
        scheduler.stop()
        
        assert store.write_count == 0
    
    def test_stop_does_not_flush(self, sincedb_path):
        """Test stopping leaves the final write to the caller."""
        store = CursorStore(sincedb_path)
        store.load()
        
        scheduler = CheckpointScheduler(store, interval=60)
        scheduler.start()
        store.advance("cursor-1")
        scheduler.stop()
        
        assert not scheduler.is_running
        assert store.persisted_value() == ""
    
    def test_stop_is_prompt(self, sincedb_path):
        """Test stop does not wait out the interval."""
        scheduler = CheckpointScheduler(CursorStore(sincedb_path), interval=60)
        scheduler.start()
        
        started = time.monotonic()
        scheduler.stop()
        
        assert time.monotonic() - started < 1.0
    
    def test_start_and_stop_are_idempotent(self, sincedb_path):
        """Test repeated start/stop calls are harmless."""
        scheduler = CheckpointScheduler(CursorStore(sincedb_path), interval=60)
        
        scheduler.stop()
        scheduler.start()
        scheduler.start()
        scheduler.stop()
        scheduler.stop()
        
        assert not scheduler.is_running
    
    def test_write_failure_retried_next_tick(self, sincedb_path):
        """Test a failed checkpoint is logged and retried."""
        store = FailingStore(sincedb_path, failures=1)
        store.load()
        store.advance("cursor-1")
        
        scheduler = CheckpointScheduler(store, interval=0.05)
        
        assert scheduler.tick() is False
        assert scheduler.failures == 1
        
        assert scheduler.tick() is True
        assert store.persisted_value() == "cursor-1"
