"""Tests for run history persistence."""

import json
from pathlib import Path

import pytest

from quick_vrt.history import MAX_HISTORY_ITEMS, HistoryManager
from quick_vrt.models.pair import UrlPair


@pytest.fixture
def manager(tmp_path: Path) -> HistoryManager:
    return HistoryManager(history_path=tmp_path / "history.json")


def _pair(n: int) -> UrlPair:
    return UrlPair(before=f"https://site.test/{n}", after=f"https://staging.site.test/{n}")


class TestHistoryManager:
    def test_missing_file_is_empty(self, manager):
        assert manager.load().entries == []

    def test_add_newest_first(self, manager):
        first = manager.add([_pair(1)], {"viewport_width": 1280})
        second = manager.add([_pair(2)])

        entries = manager.load().entries
        assert [e.id for e in entries] == [second.id, first.id]
        assert entries[1].options == {"viewport_width": 1280}
        assert entries[1].url_pairs == [_pair(1)]

    def test_ids_are_unique(self, manager):
        ids = {manager.add([_pair(i)]).id for i in range(5)}
        assert len(ids) == 5

    def test_capped_at_max(self, manager):
        for i in range(MAX_HISTORY_ITEMS + 5):
            manager.add([_pair(i)])

        entries = manager.load().entries
        assert len(entries) == MAX_HISTORY_ITEMS
        assert entries[0].url_pairs[0] == _pair(MAX_HISTORY_ITEMS + 4)

    def test_file_is_a_json_list(self, manager):
        manager.add([_pair(1)])
        data = json.loads(manager.history_path.read_text())
        assert isinstance(data, list)
        assert data[0]["url_pairs"][0]["before"] == "https://site.test/1"

    def test_get_and_delete(self, manager):
        entry = manager.add([_pair(1)])
        manager.add([_pair(2)])

        assert manager.get(entry.id).url_pairs == [_pair(1)]
        assert manager.delete(entry.id) is True
        assert manager.get(entry.id) is None
        assert len(manager.load().entries) == 1

    def test_delete_unknown(self, manager):
        manager.add([_pair(1)])
        assert manager.delete("does-not-exist") is False

    def test_clear(self, manager):
        manager.add([_pair(1)])
        manager.clear()
        assert manager.load().entries == []

    def test_corrupt_file_degrades_to_empty(self, manager):
        manager.history_path.write_text("{not json")
        assert manager.load().entries == []

        manager.add([_pair(1)])
        assert len(manager.load().entries) == 1

    def test_display(self, manager):
        entry = manager.add([_pair(1), _pair(2)])
        assert "2 pair(s)" in entry.display()
        assert entry.timestamp in entry.display()
