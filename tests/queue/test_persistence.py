"""Tests for the on-disk queue store and the shared JSON helpers."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ggdeals_sync.core.json_store import write_json_atomic
from ggdeals_sync.queue.persistence import QueuePersistence


class TestQueuePersistence(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "queue.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_loads_empty(self):
        assert QueuePersistence(self.path).load() == set()

    def test_save_then_load(self):
        store = QueuePersistence(self.path)
        store.save({"b", "a", "c"})

        assert json.loads(self.path.read_text("utf-8")) == ["a", "b", "c"]
        assert QueuePersistence(self.path).load() == {"a", "b", "c"}

    def test_invalid_json_loads_empty(self):
        self.path.write_text("[not json", encoding="utf-8")
        assert QueuePersistence(self.path).load() == set()

    def test_wrong_shape_loads_empty(self):
        """A JSON value that is not a list of strings is treated as no queue."""
        for content in ('{"a": 1}', '["a", 2]', '"a"', "null"):
            with self.subTest(content=content):
                self.path.write_text(content, encoding="utf-8")
                assert QueuePersistence(self.path).load() == set()

    def test_save_creates_parent_directory(self):
        nested = Path(self._tmp.name) / "nested" / "dir" / "queue.json"
        QueuePersistence(nested).save({"x"})
        assert nested.exists()

    def test_save_leaves_no_temp_file(self):
        QueuePersistence(self.path).save({"a"})
        assert sorted(p.name for p in self.path.parent.iterdir()) == ["queue.json"]


class TestWriteJsonAtomic(unittest.TestCase):
    def test_failed_replace_keeps_previous_content(self):
        """A crash before the rename leaves the old file intact and no temp file behind."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "data.json"
            write_json_atomic(path, ["old"])

            with patch("ggdeals_sync.core.json_store.os.replace", side_effect=OSError("disk")):
                with self.assertRaises(OSError):
                    write_json_atomic(path, ["new"])

            assert json.loads(path.read_text("utf-8")) == ["old"]
            assert not path.with_suffix(".json.tmp").exists()
