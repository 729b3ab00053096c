from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from . import config
from .utils import wikibase_day


class UrlType(str, Enum):
    WIKI_EXTERNAL = "wiki_external"
    DIRECT_WEBSITE = "direct_website"
    EXTERNAL_ID = "external_id"


@dataclass(frozen=True)
class EntityStatement:
    entity: str
    property: str
    id: str
    claim: dict[str, Any]


@dataclass
class UrlCandidate:
    url: str
    url_type: UrlType
    property: Optional[str] = None
    external_id: Optional[str] = None
    stated_in: Optional[str] = None
    language: str = config.DEFAULT_LANGUAGE
    text: str = ""


@dataclass(frozen=True, order=True)
class TextPart:
    before: str
    match: str
    after: str

    def to_dict(self) -> dict[str, str]:
        return {"before": self.before, "match": self.match, "after": self.after}


def _optional_key(value: Optional[str]) -> tuple[bool, str]:
    # None sorts before every string
    return (value is not None, value or "")


@dataclass
class ConciseCandidate:
    """One proposed reference: a statement, the page that seems to back it, and the matching text."""

    statement_id: str
    url: str
    property: Optional[str] = None
    external_id: Optional[str] = None
    stated_in: Optional[str] = None
    language: str = config.DEFAULT_LANGUAGE
    texts: list[TextPart] = field(default_factory=list)

    @classmethod
    def from_match(cls, statement_id: str, candidate: UrlCandidate, part: TextPart) -> "ConciseCandidate":
        return cls(
            statement_id=statement_id,
            url=candidate.url,
            property=candidate.property,
            external_id=candidate.external_id,
            stated_in=candidate.stated_in,
            language=candidate.language,
            texts=[part],
        )

    def merge_key(self) -> tuple:
        return (
            self.statement_id,
            self.url,
            _optional_key(self.property),
            _optional_key(self.external_id),
        )

    def sort_key(self) -> tuple:
        return self.merge_key() + (self.language,)

    def to_dict(self) -> dict[str, Any]:
        return {
            "statement_id": self.statement_id,
            "url": self.url,
            "property": self.property,
            "external_id": self.external_id,
            "stated_in": self.stated_in,
            "language": self.language,
            "texts": [part.to_dict() for part in self.texts],
        }

    def as_reference(self, retrieved=None) -> dict[str, Any]:
        """
        Build a Wikibase reference block for this candidate.
        External-id candidates cite the identifier itself, everything else cites the URL.
        """
        snaks: dict[str, list[dict[str, Any]]] = {}
        if self.external_id and self.property and self.property != config.PROP_DESCRIBED_AT_URL:
            snaks[self.property] = [_string_snak(self.property, self.external_id, "external-id")]
        else:
            snaks[config.PROP_REFERENCE_URL] = [_string_snak(config.PROP_REFERENCE_URL, self.url, "url")]
        if self.stated_in:
            snaks[config.PROP_STATED_IN] = [
                {
                    "snaktype": "value",
                    "property": config.PROP_STATED_IN,
                    "datatype": "wikibase-item",
                    "datavalue": {
                        "type": "wikibase-entityid",
                        "value": {"entity-type": "item", "id": self.stated_in},
                    },
                }
            ]
        snaks[config.PROP_RETRIEVED] = [
            {
                "snaktype": "value",
                "property": config.PROP_RETRIEVED,
                "datatype": "time",
                "datavalue": {
                    "type": "time",
                    "value": {
                        "time": wikibase_day(retrieved),
                        "timezone": 0,
                        "before": 0,
                        "after": 0,
                        "precision": config.TIME_PRECISION_DAY,
                        "calendarmodel": config.GREGORIAN_CALENDAR,
                    },
                },
            }
        ]
        return {"snaks": snaks, "snaks-order": list(snaks.keys())}


def _string_snak(property_id: str, value: str, datatype: str) -> dict[str, Any]:
    return {
        "snaktype": "value",
        "property": property_id,
        "datatype": datatype,
        "datavalue": {"type": "string", "value": value},
    }
