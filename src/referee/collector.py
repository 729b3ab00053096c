import logging
from concurrent.futures import ThreadPoolExecutor

import mwclient

from . import config
from .entities import EntityLoadError, entity_id_values, iter_statements, sitelinks, string_values
from .models import UrlCandidate, UrlType
from .text import guess_language, html_to_text
from .utils import safe_get, unique_sorted

logger = logging.getLogger(__name__)


def web_server_for_wiki(wiki):
    """Map a sitelink site id (e.g. 'dewiki', 'enwikisource') to its host name."""
    lang = wiki.split("wik")[0].replace("_", "-")
    for suffix, domain in config.WIKI_FAMILY_HOSTS:
        if wiki.endswith(suffix):
            return f"{lang}.{domain}"
    return f"{lang}.wikipedia.org"


def fetch_wiki_extlinks(server, title):
    """Return the raw `prop=extlinks` API answer for one wiki page."""
    site = mwclient.Site(
        server,
        clients_useragent=config.HEADERS["User-Agent"],
        max_retries=0,
        do_init=False,
        reqs={"timeout": config.FETCH_TIMEOUT},
    )
    try:
        return site.api(
            "query",
            http_method="GET",
            prop="extlinks",
            titles=title.replace(" ", "_"),
            ellimit=config.EXTLINKS_LIMIT,
            elexpandurl=1,
        )
    finally:
        site.connection.close()


def extlinks_from_response(payload):
    """Extract outbound http(s) links from an extlinks answer, skipping wiki-family hosts and repeats."""
    urls = []
    seen = set()
    pages = safe_get(payload, "query", "pages", default={})
    if isinstance(pages, dict):
        pages = list(pages.values())
    if not isinstance(pages, list):
        return urls
    for page in pages:
        if not isinstance(page, dict):
            continue
        links = page.get("extlinks")
        if not isinstance(links, list):
            continue
        for link in links:
            if not isinstance(link, dict):
                continue
            url = link.get("*") or link.get("url")
            if not isinstance(url, str) or not url.startswith("http"):
                continue
            if config.WIKI_URL_PATTERN.search(url):
                continue
            if url in seen:
                continue
            seen.add(url)
            urls.append(url)
    return urls


class CandidateCollector:
    """Assemble the pool of pages worth searching for one entity."""

    def __init__(self, entities, fetcher, executor, wiki_links=fetch_wiki_extlinks):
        self.entities = entities
        self.fetcher = fetcher
        self.executor = executor
        self.wiki_links = wiki_links

    def collect(self, entity):
        """Run the three strategies concurrently and return {url: UrlCandidate}."""
        with ThreadPoolExecutor(max_workers=3) as strategies:
            from_wikis = strategies.submit(self.from_wikis, entity)
            direct = strategies.submit(self.direct_websites, entity)
            external = strategies.submit(self.external_ids, entity)
            pools = [from_wikis.result(), direct.result(), external.result()]
        candidates = {}
        for pool in pools:
            for url, candidate in pool.items():
                candidates.setdefault(url, candidate)
        self.add_stated_in(candidates)
        return candidates

    def build_candidate(self, url, url_type, property_id=None, external_id=None):
        """Fetch and flatten one page; None when nothing usable came back."""
        contents = self.fetcher.fetch(url)
        if not contents:
            return None
        text = html_to_text(contents)
        return UrlCandidate(
            url=url,
            url_type=url_type,
            property=property_id,
            external_id=external_id,
            language=guess_language(text),
            text=text,
        )

    def _build_all(self, jobs):
        futures = [self.executor.submit(self.build_candidate, *job) for job in jobs]
        candidates = {}
        for future in futures:
            try:
                candidate = future.result()
            except Exception as exc:
                logger.debug("    [!] Candidate build failed: %s", exc)
                continue
            if candidate is not None:
                candidates.setdefault(candidate.url, candidate)
        return candidates

    def _wiki_page_links(self, wiki, title):
        try:
            payload = self.wiki_links(web_server_for_wiki(wiki), title)
        except Exception as exc:
            logger.debug("    [!] extlinks failed for %s:%s: %s", wiki, title, exc)
            return []
        return extlinks_from_response(payload)

    def from_wikis(self, entity):
        pages = [(wiki, title) for wiki, title in sitelinks(entity) if ":" not in title]
        link_futures = [self.executor.submit(self._wiki_page_links, wiki, title) for wiki, title in pages]
        urls = []
        seen = set()
        for future in link_futures:
            for url in future.result():
                if url not in seen:
                    seen.add(url)
                    urls.append(url)
        logger.debug("[*] %s wiki pages yielded %s outbound links", len(pages), len(urls))
        return self._build_all([(url, UrlType.WIKI_EXTERNAL) for url in urls])

    def direct_websites(self, entity):
        jobs = []
        seen = set()
        for property_id in (config.PROP_OFFICIAL_WEBSITE, config.PROP_DESCRIBED_AT_URL):
            for url in unique_sorted(string_values(entity, property_id)):
                if url in seen:
                    continue
                seen.add(url)
                jobs.append((url, UrlType.DIRECT_WEBSITE, property_id))
        return self._build_all(sorted(jobs))

    def external_id_pairs(self, entity):
        pairs = set()
        for statement in iter_statements(entity):
            mainsnak = statement.get("mainsnak") or {}
            if mainsnak.get("datatype") != "external-id":
                continue
            value = safe_get(mainsnak, "datavalue", "value")
            if isinstance(value, str) and mainsnak.get("property"):
                pairs.add((mainsnak["property"], value))
        return sorted(pairs)

    def external_ids(self, entity):
        pairs = self.external_id_pairs(entity)
        try:
            self.entities.load_entities(unique_sorted(prop for prop, _ in pairs))
        except EntityLoadError as exc:
            logger.warning("    [!] Could not load external-id properties: %s", exc)
            return {}
        jobs = []
        url_in_use = set()
        for property_id, external_id in pairs:
            prop = self.entities.get_entity(property_id)
            if not prop:
                continue
            formatter_urls = string_values(prop, config.PROP_FORMATTER_URL)
            if not formatter_urls:
                continue
            url = formatter_urls[0].replace("$1", external_id)
            if url in url_in_use:
                continue
            url_in_use.add(url)
            jobs.append((url, UrlType.EXTERNAL_ID, property_id, external_id))
        return self._build_all(jobs)

    def add_stated_in(self, candidates):
        """Attach the property's 'applicable stated in' item where one is declared."""
        properties = unique_sorted(c.property for c in candidates.values() if c.url_type == UrlType.EXTERNAL_ID)
        try:
            self.entities.load_entities(properties)
        except EntityLoadError as exc:
            logger.debug("    [!] stated-in lookup skipped: %s", exc)
            return
        for candidate in candidates.values():
            if candidate.url_type != UrlType.EXTERNAL_ID or not candidate.property:
                continue
            prop = self.entities.get_entity(candidate.property)
            stated_in = entity_id_values(prop, config.PROP_APPLICABLE_STATED_IN) if prop else []
            if stated_in:
                candidate.stated_in = stated_in[0]
