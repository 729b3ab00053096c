import logging
import re

from . import config
from .models import ConciseCandidate, TextPart, UrlType
from .utils import safe_get

logger = logging.getLogger(__name__)


def _snak_string(snak):
    value = safe_get(snak, "datavalue", "value")
    return value if isinstance(value, str) else None


def statement_has_reference(statement, candidate):
    """
    True when the statement already cites this URL (P854), or, for external-id
    candidates, already cites this exact property/identifier pair.
    """
    for reference in statement.claim.get("references") or []:
        snaks = reference.get("snaks") or {}
        for snak in snaks.get(config.PROP_REFERENCE_URL) or []:
            if _snak_string(snak) == candidate.url:
                return True
        if candidate.url_type != UrlType.EXTERNAL_ID or not candidate.property:
            continue
        for snak in snaks.get(candidate.property) or []:
            if candidate.external_id is not None and _snak_string(snak) == candidate.external_id:
                return True
    return False


def is_suppressed(statement, candidate):
    """Known false-positive hosts for specific properties."""
    hosts = config.FALSE_POSITIVE_HOSTS.get(statement.property, ())
    return any(host in candidate.url for host in hosts)


WINDOW_TEMPLATE = r"(?P<before>(?:\b.{0,%d})?)(?<!\w)(?P<match>%s)(?!\w)(?P<after>(?:.{0,%d}\b)?)"


def compile_window_pattern(pattern, literal=False):
    """Wrap `pattern` in the context-window regex; None when it does not compile."""
    window = config.CONTEXT_WINDOW
    body = re.escape(pattern) if literal else pattern
    try:
        return re.compile(WINDOW_TEMPLATE % (window, body, window))
    except re.error:
        return None


def find_text_part(pattern, text):
    """
    Return the first match of `pattern` in `text` with up to 60 characters of context on each side.
    A pattern that does not compile, or finds nothing as a regex, is searched again as a literal.
    """
    for literal in (False, True):
        regex = compile_window_pattern(pattern, literal=literal)
        if regex is None:
            continue
        match = regex.search(text)
        if match:
            return TextPart(before=match.group("before"), match=match.group("match"), after=match.group("after"))
    return None


def match_candidate(statement, candidate, patterns):
    """Return one ConciseCandidate per pattern found in the candidate's text."""
    results = []
    seen = set()
    for pattern in patterns:
        if not pattern or not pattern.strip() or pattern in seen:
            continue
        seen.add(pattern)
        part = find_text_part(pattern, candidate.text)
        if part is not None:
            results.append(ConciseCandidate.from_match(statement.id, candidate, part))
    return results


def is_reportable(statement, record):
    """Described-at-URL statements and candidates are satisfied by their own existence."""
    if statement.property == config.PROP_DESCRIBED_AT_URL:
        return False
    return record.property != config.PROP_DESCRIBED_AT_URL


class Matcher:
    def __init__(self, pattern_generator):
        self.pattern_generator = pattern_generator
        self._pattern_cache = {}

    def patterns_for(self, statement, language):
        key = (statement.id, language)
        if key not in self._pattern_cache:
            self._pattern_cache[key] = self.pattern_generator.patterns(statement, language)
        return self._pattern_cache[key]

    def process_statement(self, statement, candidates):
        """Match one statement against every candidate page."""
        if not statement.id:
            return []
        results = []
        for candidate in candidates:
            if statement_has_reference(statement, candidate):
                continue
            if is_suppressed(statement, candidate):
                continue
            patterns = self.patterns_for(statement, candidate.language)
            for record in match_candidate(statement, candidate, patterns):
                if is_reportable(statement, record):
                    results.append(record)
        return results
