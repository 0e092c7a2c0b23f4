"""Unit tests for EntityCache."""

from prodsync.features.sync.repositories.entity_cache import EntityCache
from prodsync.features.sync.services.label_numbering import TypeCodeNumbering
from tests.utils.factories import make_entity


class TestUpsert:
    """Tests for insert-or-replace by uuid."""

    def test_upsert_inserts_new_entity(self) -> None:
        cache = EntityCache()

        changed = cache.upsert(make_entity("u1", "CAM 1"))

        assert changed is True
        assert "u1" in cache
        assert len(cache) == 1

    def test_upsert_same_entity_twice_is_noop(self) -> None:
        """Applying the identical record again must change nothing."""
        cache = EntityCache()
        entity = make_entity("u1", "CAM 1", resolution="1080p")
        cache.upsert(entity)
        before = cache.list()

        changed = cache.upsert(make_entity("u1", "CAM 1", resolution="1080p"))

        assert changed is False
        assert cache.list() == before

    def test_upsert_replaces_by_uuid_not_label(self) -> None:
        """Two records sharing a display label are still distinct entities."""
        cache = EntityCache()
        cache.upsert(make_entity("u1", "CAM 1"))
        cache.upsert(make_entity("u2", "CAM 1"))
        cache.upsert(make_entity("u1", "CAM 2", version=2))

        assert len(cache) == 2
        assert cache.get("u1").id == "CAM 2"
        assert cache.get("u2").id == "CAM 1"

    def test_replaced_record_keeps_its_position(self) -> None:
        cache = EntityCache()
        for uuid in ("a", "b", "c"):
            cache.upsert(make_entity(uuid))

        cache.upsert(make_entity("a", "renamed", version=2))

        assert [e.uuid for e in cache.list()] == ["a", "b", "c"]


class TestRemove:
    """Tests for removal by uuid."""

    def test_remove_returns_removed_record(self) -> None:
        cache = EntityCache()
        entity = make_entity("u1")
        cache.upsert(entity)

        assert cache.remove("u1") == entity
        assert "u1" not in cache

    def test_remove_missing_uuid_is_noop(self) -> None:
        cache = EntityCache()
        cache.upsert(make_entity("u1"))

        assert cache.remove("missing") is None
        assert len(cache) == 1


class TestListing:
    """Tests for ordering and wholesale replacement."""

    def test_list_uses_sort_key(self) -> None:
        numbering = TypeCodeNumbering(type_order=("FOH", "BSM"))
        cache = EntityCache(sort_key=numbering.sort_key)
        cache.upsert(make_entity("c", "BSM 1"))
        cache.upsert(make_entity("b", "FOH 2"))
        cache.upsert(make_entity("a", "FOH 1"))

        assert [e.id for e in cache.list()] == ["FOH 1", "FOH 2", "BSM 1"]

    def test_replace_all_drops_missing_and_dedups(self) -> None:
        cache = EntityCache()
        cache.upsert(make_entity("old"))

        cache.replace_all(
            [make_entity("a"), make_entity("b"), make_entity("a", version=3)]
        )

        assert cache.uuids() == {"a", "b"}
        assert cache.get("a").version == 3
