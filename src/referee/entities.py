import logging
import threading

from . import config
from .utils import chunked, get_json, is_entity_or_property_id, safe_get

logger = logging.getLogger(__name__)


class EntityLoadError(Exception):
    def __init__(self, code, message, details=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self):
        return f"{self.code}: {self.message}"


class EntityCache:
    """Request-scoped id -> entity JSON cache, shared by the fetch threads of one lookup."""

    def __init__(self, api_get=get_json, batch_size=config.ENTITY_BATCH_SIZE):
        self._api_get = api_get
        self.batch_size = batch_size
        self._entities = {}
        self._missing = set()
        self._lock = threading.Lock()
        self.stats = {
            "cache_hits": 0,
            "api_batches": 0,
            "api_ids": 0,
        }

    def get_entity(self, entity_id):
        with self._lock:
            return self._entities.get(entity_id)

    def load_entity(self, entity_id):
        """Load one entity (if needed) and return it, or None when it does not exist."""
        self.load_entities([entity_id])
        return self.get_entity(entity_id)

    def load_entities(self, ids):
        """
        Fetch every id not yet known in batches of `batch_size`.
        Raises EntityLoadError when the API gives no usable answer for a batch.
        """
        pending = []
        seen = set()
        with self._lock:
            for entity_id in ids:
                if not is_entity_or_property_id(entity_id) or entity_id in seen:
                    continue
                seen.add(entity_id)
                if entity_id in self._entities or entity_id in self._missing:
                    self.stats["cache_hits"] += 1
                    continue
                pending.append(entity_id)
        for batch in chunked(pending, self.batch_size):
            self._load_batch(batch)

    def _load_batch(self, batch):
        params = {
            "action": "wbgetentities",
            "ids": "|".join(batch),
            "props": "info|claims|labels|aliases|sitelinks",
        }
        with self._lock:
            self.stats["api_batches"] += 1
            self.stats["api_ids"] += len(batch)
        data = self._api_get(params)
        if not data or "entities" not in data:
            error = safe_get(data, "error", "info") if isinstance(data, dict) else None
            raise EntityLoadError(
                "API_FAILURE",
                f"Could not load {', '.join(batch)} from Wikidata.",
                {"ids": batch, "error": error},
            )
        resolved = set()
        with self._lock:
            for entity_id, entity in data["entities"].items():
                if not isinstance(entity, dict) or "missing" in entity:
                    self._missing.add(entity_id)
                    resolved.add(entity_id)
                    continue
                self._entities.setdefault(entity_id, entity)
                resolved.add(entity_id)
                redirect_from = safe_get(entity, "redirects", "from")
                if redirect_from:
                    self._entities.setdefault(redirect_from, entity)
                    resolved.add(redirect_from)
            for entity_id in set(batch) - resolved:
                self._missing.add(entity_id)
        unresolved = set(batch) - resolved
        if unresolved:
            logger.debug("    [!] Unresolved ids in batch: %s", ", ".join(sorted(unresolved)))


def iter_statements(entity):
    """Yield every statement of an entity, property by property."""
    for statements in (safe_get(entity, "claims", default={}) or {}).values():
        yield from statements


def statements_for(entity, property_id):
    return safe_get(entity, "claims", property_id, default=[]) or []


def datavalue(statement):
    """Return the mainsnak datavalue dict, or None for somevalue/novalue snaks."""
    return safe_get(statement, "mainsnak", "datavalue")


def entity_id_from_value(value):
    """Return the id of a wikibase-entityid datavalue payload."""
    if not isinstance(value, dict):
        return None
    if value.get("id"):
        return value["id"]
    numeric_id = value.get("numeric-id")
    if numeric_id is None:
        return None
    prefix = "P" if value.get("entity-type") == "property" else "Q"
    return f"{prefix}{numeric_id}"


def string_values(entity, property_id):
    """Return all plain string values of a property, in statement order."""
    values = []
    for statement in statements_for(entity, property_id):
        dv = datavalue(statement)
        if dv and dv.get("type") == "string" and isinstance(dv.get("value"), str):
            values.append(dv["value"])
    return values


def entity_id_values(entity, property_id):
    values = []
    for statement in statements_for(entity, property_id):
        dv = datavalue(statement)
        if dv and dv.get("type") == "wikibase-entityid":
            target = entity_id_from_value(dv.get("value"))
            if target:
                values.append(target)
    return values


def has_target_entity(entity, property_id, target):
    return target in entity_id_values(entity, property_id)


def sitelinks(entity):
    """Return (site, title) pairs for all sitelinks."""
    pairs = []
    for site, link in (safe_get(entity, "sitelinks", default={}) or {}).items():
        title = link.get("title") if isinstance(link, dict) else None
        if title:
            pairs.append((link.get("site") or site, title))
    return pairs


def label(entity, lang):
    """Return the label in exactly this language (no fallback)."""
    return safe_get(entity, "labels", lang, "value")


def aliases(entity, lang):
    values = safe_get(entity, "aliases", lang, default=[]) or []
    return [alias["value"] for alias in values if alias.get("value")]
