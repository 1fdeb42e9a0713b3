"""Tests for the SQLite item store."""
import pytest

from clipflow.core.storage.item_store import ItemStore, content_digest


class TestContentLookup:
    def test_find_by_content_exact(self, store, make_item):
        item = make_item("copy me")
        store.insert(item)
        found = store.find_by_content("copy me")
        assert found is not None
        assert found.id == item.id

    def test_find_by_content_is_whitespace_sensitive(self, store, make_item):
        store.insert(make_item("copy me"))
        assert store.find_by_content("copy me ") is None

    def test_find_missing(self, store):
        assert store.find_by_content("nope") is None

    def test_digest_is_stable(self):
        assert content_digest("abc") == content_digest("abc")
        assert content_digest("abc") != content_digest("abd")


class TestCrud:
    def test_roundtrip_preserves_fields(self, store, make_item):
        item = make_item("data", type="json", timestamp=42, source="Chrome",
                         is_pinned=True, categories={"work", "später"})
        store.insert(item)
        got = store.get(item.id)
        assert got == item

    def test_update(self, store, make_item):
        item = make_item("v1")
        store.insert(item)
        item.timestamp = 99
        item.source = "Slack"
        store.update(item)
        assert store.get(item.id).timestamp == 99
        assert store.get(item.id).source == "Slack"

    def test_delete(self, store, make_item):
        item = make_item()
        store.insert(item)
        store.delete(item.id)
        assert store.get(item.id) is None
        assert store.count() == 0

    def test_list_all_newest_first_with_limit(self, store, make_item):
        for ts in (10, 30, 20):
            store.insert(make_item(f"t{ts}", timestamp=ts))
        assert [i.timestamp for i in store.list_all()] == [30, 20, 10]
        assert [i.timestamp for i in store.list_all(limit=2)] == [30, 20]

    def test_clear_all(self, store, make_item):
        store.insert(make_item("a"))
        store.insert(make_item("b"))
        store.clear_all()
        assert store.count() == 0


class TestBrowsing:
    def test_search_matches_content_source_type_and_categories(self, store, make_item):
        store.insert(make_item("Quarterly REPORT", timestamp=1))
        store.insert(make_item("ls -la", source="Terminal", timestamp=2))
        store.insert(make_item("{}", type="json", timestamp=3))
        store.insert(make_item("misc", categories={"recipes"}, timestamp=4))

        assert [i.content for i in store.search("report")] == ["Quarterly REPORT"]
        assert [i.content for i in store.search("terminal")] == ["ls -la"]
        assert [i.content for i in store.search("JSON")] == ["{}"]
        assert [i.content for i in store.search("recipe")] == ["misc"]

    def test_search_escapes_wildcards(self, store, make_item):
        store.insert(make_item("100% done", timestamp=1))
        store.insert(make_item("1000 done", timestamp=2))
        assert [i.content for i in store.search("0%")] == ["100% done"]

    def test_empty_search_lists_everything(self, store, make_item):
        store.insert(make_item("a", timestamp=1))
        store.insert(make_item("b", timestamp=2))
        assert len(store.search("  ")) == 2

    def test_types(self, store, make_item):
        store.insert(make_item("a", type="url"))
        store.insert(make_item("b", type="code"))
        store.insert(make_item("c", type="url"))
        assert store.unique_types() == ["code", "url"]
        assert len(store.list_by_type("url")) == 2


class TestPinAndCategories:
    def test_toggle_pin(self, store, make_item):
        item = make_item()
        store.insert(item)
        assert store.toggle_pin(item.id) is True
        assert store.get(item.id).is_pinned
        assert store.toggle_pin(item.id) is False
        assert store.toggle_pin("missing") is False

    def test_add_and_remove_category(self, store, make_item):
        item = make_item()
        store.insert(item)
        assert store.add_category(item.id, "work")
        assert store.add_category(item.id, "snippets")
        assert store.get(item.id).categories == {"work", "snippets"}
        assert store.remove_category(item.id, "work")
        assert store.get(item.id).categories == {"snippets"}
        assert store.get(item.id).is_protected
        assert not store.add_category("missing", "x")


def test_file_backed_store_persists(tmp_path, make_item):
    path = tmp_path / "history.db"
    item = make_item("persist me")
    with ItemStore(path) as s:
        s.insert(item)
    with ItemStore(path) as s:
        assert s.find_by_content("persist me").id == item.id


@pytest.mark.parametrize("content", ["", "emoji 🎉", "line1\nline2"])
def test_odd_content(store, make_item, content):
    item = make_item(content)
    store.insert(item)
    assert store.find_by_content(content).id == item.id
