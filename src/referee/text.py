import html
import re

from . import config

_BODY_OPEN = re.compile(r"<body[^>]*>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body>", re.IGNORECASE)
_COMMENT = re.compile(r"<!--.*?-->")
_SCRIPT_STYLE = re.compile(r"<(script|style)\b.*?</\1\s*>", re.IGNORECASE)
_BLOCK_END = re.compile(r"</(p|div|br)>", re.IGNORECASE)
_BR_SELF_CLOSING = re.compile(r"<br\s*/>", re.IGNORECASE)
_TAG = re.compile(r"<.+?>")
_HSPACE = re.compile(r"[\r\t \xa0]+")
_NEWLINES = re.compile(r"\n+")
_SPACES = re.compile(r" +")

_LANGUAGE_PATTERNS = {
    lang: re.compile(r"\b(" + "|".join(words) + r")\b") for lang, words in config.LANGUAGE_MARKERS.items()
}


def html_to_text(raw_html):
    """
    Flatten an HTML page into plain text for substring search.
    Only the <body> region survives; block ends become newlines and whitespace is collapsed.
    """
    if not raw_html:
        return ""
    text = raw_html.replace("\n", " ")

    body_open = _BODY_OPEN.search(text)
    if body_open:
        text = text[body_open.end() :]
    body_close = _BODY_CLOSE.search(text)
    if body_close:
        text = text[: body_close.start()]

    text = _COMMENT.sub(" ", text)
    text = _SCRIPT_STYLE.sub(" ", text)
    text = _BLOCK_END.sub("\n", text)
    text = _BR_SELF_CLOSING.sub("\n", text)
    text = _TAG.sub(" ", text)
    text = html.unescape(text)

    text = _HSPACE.sub(" ", text)
    text = text.replace(" \n", "\n").replace("\n ", "\n")
    text = _NEWLINES.sub("\n", text)
    text = _SPACES.sub(" ", text)
    return text


def count_language_markers(text):
    """Return {language: number of function-word hits}."""
    return {lang: len(pattern.findall(text or "")) for lang, pattern in _LANGUAGE_PATTERNS.items()}


def guess_language(text):
    """
    Crude function-word vote between en/de/it/fr/es.
    Only good enough to pick a date locale; low-signal text and ties stay on the default.
    """
    counts = count_language_markers(text)
    best = max(counts.values(), default=0)
    if best <= config.LANGUAGE_MIN_HITS:
        return config.DEFAULT_LANGUAGE
    winners = [lang for lang, count in counts.items() if count == best]
    if len(winners) != 1:
        return config.DEFAULT_LANGUAGE
    return winners[0]
