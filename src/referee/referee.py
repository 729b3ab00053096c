import logging
from concurrent.futures import ThreadPoolExecutor

from . import config
from .collector import CandidateCollector, fetch_wiki_extlinks
from .entities import EntityCache, EntityLoadError, has_target_entity, iter_statements
from .fetcher import DocumentFetcher
from .matcher import Matcher
from .merge import merge_candidates
from .models import EntityStatement
from .patterns import PatternGenerator, linked_entity_ids
from .utils import is_qid, normalize_entity_id

logger = logging.getLogger(__name__)


class Referee:
    """
    Finds candidate references for the unreferenced statements of one item.
    One instance serves one lookup: its entity cache is not shared between requests.
    """

    def __init__(
        self,
        entities=None,
        fetcher=None,
        wiki_links=fetch_wiki_extlinks,
        max_workers=config.FETCH_MAX_WORKERS,
    ):
        self.entities = entities or EntityCache()
        self.fetcher = fetcher or DocumentFetcher()
        self.wiki_links = wiki_links
        self.max_workers = max_workers
        self.no_refs_for_properties = config.NO_REFS_FOR_PROPERTIES
        self.unsupported_entity_markers = config.UNSUPPORTED_ENTITY_MARKERS

    def load_target(self, entity_id):
        if not is_qid(entity_id):
            raise EntityLoadError("INVALID_ID", f"{entity_id!r} is not an item id.", {"id": entity_id})
        return self.entities.load_entity(entity_id)

    def is_supported_entity(self, entity):
        if not entity:
            return False
        for property_id, target in self.unsupported_entity_markers:
            if has_target_entity(entity, property_id, target):
                return False
        return True

    def statements_needing_references(self, entity_id, entity):
        statements = []
        for claim in iter_statements(entity):
            mainsnak = claim.get("mainsnak") or {}
            property_id = mainsnak.get("property")
            if not property_id or property_id in self.no_refs_for_properties:
                continue
            if mainsnak.get("datatype") in config.SKIPPED_DATATYPES:
                continue
            statements.append(
                EntityStatement(
                    entity=entity_id,
                    property=property_id,
                    id=claim.get("id") or "",
                    claim=claim,
                )
            )
        return statements

    def preload_linked_entities(self, statements):
        try:
            self.entities.load_entities(linked_entity_ids(statements))
        except EntityLoadError as exc:
            logger.warning("    [!] Linked entities unavailable, their labels will not be searched: %s", exc)

    def log_stats(self, entity_id):
        logger.debug("[*] %s entity cache: %s", entity_id, self.entities.stats)
        fetcher_stats = getattr(self.fetcher, "stats", None)
        if fetcher_stats is not None:
            logger.debug("[*] %s page fetches: %s", entity_id, fetcher_stats)

    def get_potential_references(self, entity_id):
        """Return merged ConciseCandidates for an item; raises EntityLoadError if the item cannot be loaded."""
        entity_id = normalize_entity_id(entity_id)
        entity = self.load_target(entity_id)
        if not self.is_supported_entity(entity):
            logger.info("[*] %s is missing or not a supported kind of item.", entity_id)
            return []

        statements = self.statements_needing_references(entity_id, entity)
        if not statements:
            logger.info("[*] %s has no statements that could use a reference.", entity_id)
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            collector = CandidateCollector(self.entities, self.fetcher, executor, wiki_links=self.wiki_links)
            candidates = collector.collect(entity)
        if not candidates:
            logger.info("[*] %s: no candidate pages could be loaded.", entity_id)
            return []
        logger.info("[*] %s: %s statements, %s candidate pages.", entity_id, len(statements), len(candidates))

        self.preload_linked_entities(statements)
        matcher = Matcher(PatternGenerator(self.entities))
        ordered = [candidates[url] for url in sorted(candidates)]
        records = []
        for statement in statements:
            records.extend(matcher.process_statement(statement, ordered))
        merged = merge_candidates(records)
        logger.info("[+] %s: %s candidate references.", entity_id, len(merged))
        self.log_stats(entity_id)
        return merged


def find_references(entity_id, **kwargs):
    """Public entry point: a fresh Referee (and entity cache) per call."""
    return Referee(**kwargs).get_potential_references(entity_id)
