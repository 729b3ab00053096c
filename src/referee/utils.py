import logging
import time
from datetime import datetime, timezone

import requests

from . import config

logger = logging.getLogger(__name__)


def is_qid(value):
    """Return True if the value looks like a Wikidata item id (Q*)."""
    if not isinstance(value, str):
        return False
    return bool(config.QID_EXACT_PATTERN.fullmatch(value.strip()))


def is_pid(value):
    """Return True if the value looks like a Wikidata property id (P*)."""
    if not isinstance(value, str):
        return False
    return bool(config.PID_EXACT_PATTERN.fullmatch(value.strip()))


def is_entity_or_property_id(value):
    """Return True for valid QIDs or PIDs."""
    return is_qid(value) or is_pid(value)


def normalize_entity_id(value):
    """Trim and upper-case an entity id as typed by a user."""
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


def safe_get(payload, *keys, default=None):
    """Traverse nested dicts safely and return default on missing keys."""
    cur = payload
    for key in keys:
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def chunked(iterable, size):
    """Yield iterable slices of fixed size (used for batched API lookups)."""
    batch = []
    for item in iterable:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def unique_sorted(values):
    """Return the sorted distinct values, dropping falsy entries."""
    return sorted({value for value in values if value})


def wikibase_day(dt=None):
    """Return a Wikibase time string truncated to day precision."""
    dt = dt or datetime.now(timezone.utc)
    return dt.strftime("+%Y-%m-%dT00:00:00Z")


def get_json(params=None, *, endpoint=config.API_ENDPOINT, with_format=True):
    """Wrapper around requests.get with retries and default MediaWiki params."""
    query = dict(params or {})
    if with_format:
        query.setdefault("format", "json")
    for attempt in range(config.API_MAX_ATTEMPTS):
        try:
            response = requests.get(
                endpoint,
                headers=config.HEADERS,
                params=query if query else None,
                timeout=config.API_TIMEOUT,
            )
            if response.status_code == 200:
                return response.json()
            if response.status_code == 429:
                sleep_for = 2**attempt
                logger.warning("    [!] Rate limited. Sleeping %ss...", sleep_for)
                time.sleep(sleep_for)
            else:
                logger.warning("    [!] HTTP %s for %s", response.status_code, endpoint)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("    [!] Exception: %s", exc)
        time.sleep(0.1)
    return None
