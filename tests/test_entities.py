import unittest

from referee.entities import (
    EntityCache,
    EntityLoadError,
    aliases,
    entity_id_from_value,
    has_target_entity,
    label,
    sitelinks,
    string_values,
)

from wikidata_fixtures import FakeApi, entity, item_snak, statement, string_snak


class EntityCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.api = FakeApi({f"Q{n}": entity(f"Q{n}") for n in range(1, 6)})

    def test_loads_once(self) -> None:
        cache = EntityCache(api_get=self.api)
        self.assertEqual(cache.load_entity("Q1")["id"], "Q1")
        cache.load_entity("Q1")
        cache.load_entities(["Q1", "Q1"])
        self.assertEqual(self.api.calls, [["Q1"]])
        self.assertEqual(cache.stats, {"cache_hits": 2, "api_batches": 1, "api_ids": 1})

    def test_batches(self) -> None:
        cache = EntityCache(api_get=self.api, batch_size=2)
        cache.load_entities(["Q1", "Q2", "Q3", "Q4", "Q5"])
        self.assertEqual(self.api.calls, [["Q1", "Q2"], ["Q3", "Q4"], ["Q5"]])

    def test_missing_entities_are_remembered(self) -> None:
        cache = EntityCache(api_get=self.api)
        self.assertIsNone(cache.load_entity("Q99"))
        self.assertIsNone(cache.load_entity("Q99"))
        self.assertEqual(self.api.calls, [["Q99"]])

    def test_invalid_ids_are_skipped(self) -> None:
        cache = EntityCache(api_get=self.api)
        cache.load_entities(["", None, "foo", "P12"])
        self.assertEqual(self.api.calls, [["P12"]])

    def test_api_failure(self) -> None:
        cache = EntityCache(api_get=FakeApi({}, fail=True))
        with self.assertRaises(EntityLoadError) as ctx:
            cache.load_entity("Q1")
        self.assertEqual(ctx.exception.code, "API_FAILURE")

    def test_redirects(self) -> None:
        target = entity("Q2")
        target["redirects"] = {"from": "Q1", "to": "Q2"}

        def api_get(params):
            return {"entities": {"Q2": target}}

        cache = EntityCache(api_get=api_get)
        self.assertEqual(cache.load_entity("Q1")["id"], "Q2")


class EntityAccessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.item = entity(
            "Q42",
            statements=[
                statement("Q42$1", string_snak("P856", "https://a.example", "url")),
                statement("Q42$2", string_snak("P856", "https://b.example", "url")),
                statement("Q42$3", item_snak("P31", "Q5")),
                statement("Q42$4", {"snaktype": "novalue", "property": "P856", "datatype": "url"}),
            ],
            labels={"en": "Douglas Adams", "mul": "Douglas Adams"},
            aliases={"en": ["Douglas Noël Adams"]},
            sitelinks={"enwiki": "Douglas Adams"},
        )

    def test_string_values(self) -> None:
        self.assertEqual(string_values(self.item, "P856"), ["https://a.example", "https://b.example"])
        self.assertEqual(string_values(self.item, "P999"), [])

    def test_has_target_entity(self) -> None:
        self.assertTrue(has_target_entity(self.item, "P31", "Q5"))
        self.assertFalse(has_target_entity(self.item, "P31", "Q6"))

    def test_entity_id_from_numeric_id(self) -> None:
        self.assertEqual(entity_id_from_value({"entity-type": "item", "numeric-id": 5}), "Q5")
        self.assertEqual(entity_id_from_value({"entity-type": "property", "numeric-id": 31}), "P31")
        self.assertIsNone(entity_id_from_value("Q5"))

    def test_labels_aliases_sitelinks(self) -> None:
        self.assertEqual(label(self.item, "en"), "Douglas Adams")
        self.assertIsNone(label(self.item, "de"))
        self.assertEqual(aliases(self.item, "en"), ["Douglas Noël Adams"])
        self.assertEqual(aliases(self.item, "fr"), [])
        self.assertEqual(sitelinks(self.item), [("enwiki", "Douglas Adams")])


if __name__ == "__main__":
    unittest.main()
