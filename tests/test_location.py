"""
Tests for the location enricher.
"""

from photo_clusters.location import enrich_locations, LOCATION_LOOKUP_BUDGET
from photo_clusters.media_source import Location


class TestEnrichLocations:

    def test_attaches_coordinates(self, fake_source_cls, item_factory):
        source = fake_source_cls(locations={"a": Location(40.0, -74.0)})
        items = [item_factory("a", 0), item_factory("b", 1)]

        enriched, changed = enrich_locations(items, source)

        assert changed is True
        assert (enriched[0].lat, enriched[0].lon) == (40.0, -74.0)
        assert enriched[1].lat is None

    def test_budget_caps_lookups(self, fake_source_cls, item_factory):
        source = fake_source_cls()
        items = [item_factory(f"p{i}", i) for i in range(400)]

        _, changed = enrich_locations(items, source)

        assert len(source.location_lookups) == LOCATION_LOOKUP_BUDGET == 250
        assert changed is False

    def test_newest_photos_looked_up_first(self, fake_source_cls, item_factory):
        source = fake_source_cls()
        items = [item_factory(f"p{i}", i * 1000) for i in range(5)]

        enrich_locations(items, source, budget=2)

        assert source.location_lookups == ["p4", "p3"]

    def test_located_items_are_not_charged(self, fake_source_cls, item_factory):
        source = fake_source_cls()
        items = [
            item_factory("old", 0),
            item_factory("located", 10, lat=1.0, lon=2.0),
            item_factory("new", 20),
        ]

        enrich_locations(items, source, budget=2)

        assert source.location_lookups == ["new", "old"]

    def test_half_located_items_are_looked_up(self, fake_source_cls, item_factory):
        source = fake_source_cls(locations={"half": Location(5.0, 6.0)})
        items = [item_factory("half", 0, lat=5.0)]

        _, changed = enrich_locations(items, source)

        assert source.location_lookups == ["half"]
        assert changed is True
        assert items[0].lon == 6.0

    def test_failed_lookups_use_budget(self, fake_source_cls, item_factory):
        source = fake_source_cls(locations={
            "p2": OSError("backend down"),
            "p1": OSError("backend down"),
            "p0": Location(1.0, 1.0),
        })
        items = [item_factory(f"p{i}", i) for i in range(3)]

        enriched, changed = enrich_locations(items, source, budget=2)

        assert source.location_lookups == ["p2", "p1"]
        assert changed is False
        assert all(i.lat is None for i in enriched)

    def test_ascending_order_restored(self, fake_source_cls, item_factory):
        source = fake_source_cls(locations={"b": Location(1.0, 1.0)})
        items = [item_factory("c", 30), item_factory("a", 10), item_factory("b", 20)]

        enriched, _ = enrich_locations(items, source)

        assert [i.id for i in enriched] == ["a", "b", "c"]
