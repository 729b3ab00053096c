import re

# HTTP identity and base endpoints
HEADERS = {"User-Agent": "WikidataReferee/1.0 (reference finder; https://www.wikidata.org/wiki/User:Referee)"}
PAGE_HEADERS = {"User-Agent": "Mozilla/5.0 (Windows; U; Windows NT 5.1; rv:1.7.3) Gecko/20041001 Firefox/0.10.1"}
API_ENDPOINT = "https://www.wikidata.org/w/api.php"

# Fetch tuning knobs
API_TIMEOUT = 30  # Seconds per Wikidata API request
API_MAX_ATTEMPTS = 4
FETCH_TIMEOUT = 10  # Seconds per candidate page request
FETCH_MAX_WORKERS = 16  # Upper bound on simultaneous outbound fetches
ENTITY_BATCH_SIZE = 50  # wbgetentities id limit
EXTLINKS_LIMIT = 500

# ID validation patterns
QID_EXACT_PATTERN = re.compile(r"^Q\d+$")
PID_EXACT_PATTERN = re.compile(r"^P\d+$")

# Properties used by the reference finder
PROP_INSTANCE_OF = "P31"
PROP_COUNTRY_OF_CITIZENSHIP = "P27"
PROP_STATED_IN = "P248"
PROP_RETRIEVED = "P813"
PROP_REFERENCE_URL = "P854"
PROP_OFFICIAL_WEBSITE = "P856"
PROP_DESCRIBED_AT_URL = "P973"
PROP_FORMATTER_URL = "P1630"
PROP_APPLICABLE_STATED_IN = "P9073"

# Statements on these properties never get references
NO_REFS_FOR_PROPERTIES = frozenset(
    {
        "P225",  # Taxon name
        "P373",  # Commons category
        "P1472",  # Commons Creator page
        "P1889",  # Different from
    }
)
SKIPPED_DATATYPES = frozenset({"external-id", "commonsMedia"})

# Items carrying any of these (property, target) pairs are not processed
UNSUPPORTED_ENTITY_MARKERS = (
    (PROP_INSTANCE_OF, "Q13442814"),  # Scholarly article
    (PROP_INSTANCE_OF, "Q16521"),  # Taxon
    (PROP_INSTANCE_OF, "Q4167836"),  # Category
    (PROP_INSTANCE_OF, "Q4167410"),  # Disambiguation page
    (PROP_INSTANCE_OF, "Q5296"),  # Main page
)

# Candidate URL filters
BAD_URLS = (
    "://g.co/",
    "viaf.org/",
    "wmflabs.org",
    "www.google.com",
    "toolforge.org",
)
WIKI_URL_PATTERN = re.compile(r"\b(wikipedia|wikimedia|wik[a-z-]+)\.org/")
FALSE_POSITIVE_HOSTS = {
    PROP_COUNTRY_OF_CITIZENSHIP: ("www.invaluable.com",),
}
WIKI_FAMILY_HOSTS = (
    ("wikisource", "wikisource.org"),
    ("wiktionary", "wiktionary.org"),
    ("wikiquote", "wikiquote.org"),
    ("wiki", "wikipedia.org"),
)

# Language guessing
DEFAULT_LANGUAGE = "en"
LANGUAGE_MIN_HITS = 5  # Counts at or below this fall back to the default
LANGUAGE_MARKERS = {
    "en": ("he", "she", "it", "is", "was", "the", "a", "an"),
    "de": ("er", "sie", "es", "das", "ein", "eine", "war", "ist"),
    "it": ("è", "una", "della", "la", "nel", "si", "su", "di"),
    "fr": ("est", "un", "une", "et", "la", "il", "a", "de", "par"),
    "es": ("el", "es", "un", "de", "a", "la", "conlas", "dos"),
}

# Date rendering
TIME_PRECISION_YEAR = 9
TIME_PRECISION_DAY = 11
GREGORIAN_CALENDAR = "http://www.wikidata.org/entity/Q1985727"
MONTH_NAMES = {
    "en": (
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ),
    "de": (
        "Januar",
        "Februar",
        "März",
        "April",
        "Mai",
        "Juni",
        "Juli",
        "August",
        "September",
        "Oktober",
        "November",
        "Dezember",
    ),
    "fr": (
        "janvier",
        "février",
        "mars",
        "avril",
        "mai",
        "juin",
        "juillet",
        "août",
        "septembre",
        "octobre",
        "novembre",
        "décembre",
    ),
}
LANGUAGE_NEUTRAL_LABEL = "mul"
MIN_PATTERN_LENGTH = 3

# Matching
CONTEXT_WINDOW = 60
