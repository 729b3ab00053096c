"""Builders for Wikibase JSON and fake network collaborators used across the test modules."""

import threading


def string_snak(property_id, value, datatype="string"):
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": datatype,
        "datavalue": {"type": "string", "value": value},
    }


def item_snak(property_id, target):
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": "wikibase-item",
        "datavalue": {
            "type": "wikibase-entityid",
            "value": {"entity-type": "item", "numeric-id": int(target[1:]), "id": target},
        },
    }


def time_snak(property_id, time, precision):
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": "time",
        "datavalue": {
            "type": "time",
            "value": {
                "time": time,
                "timezone": 0,
                "before": 0,
                "after": 0,
                "precision": precision,
                "calendarmodel": "http://www.wikidata.org/entity/Q1985727",
            },
        },
    }


def monolingual_snak(property_id, text, language):
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": "monolingualtext",
        "datavalue": {"type": "monolingualtext", "value": {"text": text, "language": language}},
    }


def quantity_snak(property_id, amount):
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": "quantity",
        "datavalue": {"type": "quantity", "value": {"amount": amount, "unit": "1"}},
    }


def statement(statement_id, snak, references=None):
    claim = {"id": statement_id, "type": "statement", "rank": "normal", "mainsnak": snak}
    if references:
        claim["references"] = [{"snaks": ref} for ref in references]
    return claim


def entity(entity_id, statements=(), labels=None, aliases=None, sitelinks=None):
    claims = {}
    for claim in statements:
        claims.setdefault(claim["mainsnak"]["property"], []).append(claim)
    return {
        "id": entity_id,
        "type": "property" if entity_id.startswith("P") else "item",
        "claims": claims,
        "labels": {lang: {"language": lang, "value": value} for lang, value in (labels or {}).items()},
        "aliases": {
            lang: [{"language": lang, "value": value} for value in values] for lang, values in (aliases or {}).items()
        },
        "sitelinks": {site: {"site": site, "title": title} for site, title in (sitelinks or {}).items()},
    }


class FakeApi:
    """Stands in for the wbgetentities GET helper; answers from a dict of entities."""

    def __init__(self, entities, fail=False):
        self.entities = dict(entities)
        self.fail = fail
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, params):
        ids = params["ids"].split("|")
        with self._lock:
            self.calls.append(ids)
        if self.fail:
            return None
        payload = {}
        for entity_id in ids:
            payload[entity_id] = self.entities.get(entity_id, {"id": entity_id, "missing": ""})
        return {"entities": payload}


class FakeFetcher:
    """Returns canned HTML per URL and records every request."""

    def __init__(self, pages=None, failing=()):
        self.pages = dict(pages or {})
        self.failing = set(failing)
        self.requested = []
        self._lock = threading.Lock()

    def fetch(self, url):
        with self._lock:
            self.requested.append(url)
        if url in self.failing:
            raise RuntimeError(f"connection reset for {url}")
        return self.pages.get(url, "")


def html_page(body):
    return f"<html><head><title>t</title></head><body><p>{body}</p></body></html>"


def extlinks_payload(*urls):
    return {"query": {"pages": {"1": {"pageid": 1, "title": "Page", "extlinks": [{"*": url} for url in urls]}}}}
