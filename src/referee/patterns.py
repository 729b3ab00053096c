import logging
import re

from . import config
from .entities import EntityLoadError, aliases, datavalue, entity_id_from_value, label

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^[+-]?0*(\d+)-(\d\d)-(\d\d)")


def locale_dates(language, year, month, day):
    """Render a calendar day the ways a page in `language` would likely print it."""
    dates = [f"{year}-{month:02}-{day:02}"]
    months = config.MONTH_NAMES.get(language)
    long_month = months[month - 1] if months and 1 <= month <= 12 else ""
    short_month = long_month[:3]
    if language == "en":
        dates.append(f"{long_month} {day}, {year}")
        dates.append(f"{short_month} {day}, {year}")
    elif language == "de":
        dates.extend(
            [
                f"{day}. {long_month} {year}",
                f"{day}. {short_month} {year}",
                f"{day:02}. {long_month} {year}",
                f"{day:02}. {short_month} {year}",
                f"{day}. {month}. {year}",
                f"{day}.{month}.{year}",
                f"{day:02}. {month:02}. {year}",
                f"{day:02}.{month:02}.{year}",
            ]
        )
    elif language == "fr":
        dates.append(f"{day} {long_month} {year}")
    else:
        dates.extend(
            [
                f"{day}. {month}. {year}",
                f"{day}.{month}.{year}",
                f"{day}/{month}/{year}",
                f"{day:02}. {month:02}. {year}",
                f"{day:02}.{month:02}.{year}",
                f"{day:02}/{month:02}/{year}",
            ]
        )
    return dates


def time_patterns(value, language):
    if not isinstance(value, dict):
        return []
    match = TIME_PATTERN.match(value.get("time") or "")
    if not match:
        return []
    year, month, day = match.group(1), int(match.group(2)), int(match.group(3))
    precision = value.get("precision")
    if precision == config.TIME_PRECISION_YEAR:
        return [year]
    if precision == config.TIME_PRECISION_DAY:
        return locale_dates(language, year, month, day)
    return []


def string_patterns(value, language):
    return [value] if isinstance(value, str) else []


def monolingual_patterns(value, language):
    # The stored language tag is irrelevant; the page language drives matching.
    text = value.get("text") if isinstance(value, dict) else None
    return [text] if isinstance(text, str) else []


def entity_name_patterns(entity, language):
    """Labels (language-neutral first) then aliases, escaped for regex use."""
    names = []
    neutral = label(entity, config.LANGUAGE_NEUTRAL_LABEL)
    if neutral:
        names.append(neutral)
    local = label(entity, language)
    if local:
        names.append(local)
    names.extend(aliases(entity, language))

    patterns = []
    for name in names:
        name = name.strip()
        if len(name) < config.MIN_PATTERN_LENGTH:
            continue
        patterns.append(re.escape(name))
    return patterns


class PatternGenerator:
    """Turn a statement value into search patterns for a page in a given language."""

    def __init__(self, entities):
        self.entities = entities
        self._handlers = {
            "time": time_patterns,
            "string": string_patterns,
            "monolingualtext": monolingual_patterns,
            "wikibase-entityid": self._linked_entity_patterns,
        }

    def patterns(self, statement, language):
        if statement.property in config.NO_REFS_FOR_PROPERTIES:
            return []
        dv = datavalue(statement.claim)
        if not dv:
            return []
        handler = self._handlers.get(dv.get("type"))
        if handler is None:
            # quantity, globecoordinate and anything unknown
            return []
        return handler(dv.get("value"), language)

    def _linked_entity_patterns(self, value, language):
        target = entity_id_from_value(value)
        if not target:
            return []
        try:
            entity = self.entities.load_entity(target)
        except EntityLoadError as exc:
            logger.debug("    [!] Linked entity %s unavailable: %s", target, exc)
            return []
        if not entity:
            return []
        return entity_name_patterns(entity, language)


def linked_entity_ids(statements):
    """Return the distinct target ids of entity-valued statements (for batch preloading)."""
    targets = []
    seen = set()
    for statement in statements:
        dv = datavalue(statement.claim)
        if not dv or dv.get("type") != "wikibase-entityid":
            continue
        target = entity_id_from_value(dv.get("value"))
        if target and target not in seen:
            seen.add(target)
            targets.append(target)
    return targets
