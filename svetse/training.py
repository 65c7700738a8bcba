"""Training the brain from text files and Wikipedia articles."""

from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from itertools import chain
from os import PathLike
from typing import Union

from .model import Model

log = logging.getLogger(__name__)

_Path = Union[str, "PathLike[str]"]

_USER_AGENT = "SVETSE2/1.0 (MegaHAL chatbot trainer)"
_HTTP_TIMEOUT = 60.0
_MAX_LINE_BYTES = 1024 * 1024

_REFERENCE_RE = re.compile(r"\[[0-9]+\]")
_HEADER_RE = re.compile(r"^=+.*=+$", re.MULTILINE)
_EXTRA_WHITESPACE_RE = re.compile(r"[\t\n\f\r ]{2,}")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SENTENCE_END = ".!?"

UNSUPPORTED_SOURCE = (
    "!TRAIN supports wiki:Article, wiki:sv:Article, wiki:random, "
    "wiki:sv:random, or Wikipedia URLs"
)


class TrainingError(Exception):
    """Raised when a training source cannot be fetched or read."""


def parse_wiki_shorthand(text: str) -> tuple[str, str]:
    """Split ``"Article"`` or ``"sv:Article"`` into ``(lang, article)``."""
    prefix, sep, rest = text.partition(":")
    if sep and len(prefix.encode("utf-8")) <= 3:
        return prefix, rest
    return "en", text


def is_wikipedia_url(text: str) -> bool:
    """Return True if *text* looks like a Wikipedia article URL."""
    return "wikipedia.org/wiki/" in text


def _unescape(text: str) -> str:
    if _BAD_ESCAPE_RE.search(text):
        raise ValueError(f"invalid escape in {text!r}")
    return urllib.parse.unquote_to_bytes(text).decode("utf-8", errors="replace")


def _hostname(netloc: str) -> str:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[1:].partition("]")[0]
    return host.partition(":")[0]


def extract_wiki_article(url: str) -> tuple[str, str]:
    """Return ``(lang, article)`` from a Wikipedia URL, or ``("", "")``.

    ``Special:`` pages such as ``Special:Random`` give the article ``"random"``.
    """
    try:
        parts = urllib.parse.urlsplit(url)
        path = _unescape(parts.path)
    except ValueError:
        return "", ""
    _, sep, raw_article = path.partition("/wiki/")
    if not sep:
        return "", ""
    try:
        article = _unescape(raw_article)
    except ValueError:
        article = raw_article

    lang = "en"
    host_parts = _hostname(parts.netloc).split(".")
    if len(host_parts) >= 3 and host_parts[1] == "wikipedia":
        lang = host_parts[0]
    if article.startswith("Special:"):
        article = "random"
    return lang, article


def clean_wikipedia_text(text: str) -> str:
    """Remove ``[n]`` references and section headers, collapse whitespace."""
    text = _REFERENCE_RE.sub("", text)
    text = _HEADER_RE.sub("", text)
    return _EXTRA_WHITESPACE_RE.sub(" ", text)


def split_sentences(text: str) -> list[str]:
    """Split *text* after ``.``, ``!`` or ``?`` followed by a space or newline."""
    sentences: list[str] = []
    current: list[str] = []
    for char, following in zip(text, chain(text[1:], [""])):
        current.append(char)
        if char in _SENTENCE_END and following in (" ", "\n"):
            sentence = "".join(current).strip()
            if sentence:
                sentences.append(sentence)
            current = []
    rest = "".join(current).strip()
    if rest:
        sentences.append(rest)
    return sentences


def train_from_file(model: Model, path: _Path) -> int:
    """Learn each non-blank, non-comment line of *path*; return the count.

    Raises ``OSError`` if the file cannot be read and ``TrainingError``
    for a line longer than one mebibyte.
    """
    with open(path, "rb") as handle:
        data = handle.read()
    lines = data.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()

    count = 0
    for raw in lines:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        if len(raw) >= _MAX_LINE_BYTES:
            raise TrainingError("line too long")
        line = raw.decode("utf-8", errors="replace").strip()
        if not line or line.startswith("#"):
            continue
        model.learn(line)
        count += 1
    return count


def _get(url: str) -> tuple[int, bytes]:
    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=_HTTP_TIMEOUT) as response:
            return response.status, response.read()
    except urllib.error.HTTPError as exc:
        try:
            body = exc.read() or b""
        except Exception:
            body = b""
        return exc.code, body
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise TrainingError(str(exc)) from exc


def _decode_json(body: bytes) -> dict:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise TrainingError(f"parse response: {exc}") from exc
    if not isinstance(data, dict):
        raise TrainingError("parse response: unexpected JSON document")
    return data


def fetch_random_article(lang: str) -> str:
    """Return the title of a random article of the *lang* Wikipedia."""
    url = (
        f"https://{lang}.wikipedia.org/w/api.php"
        "?action=query&list=random&rnnamespace=0&rnlimit=1&format=json"
    )
    _, body = _get(url)
    data = _decode_json(body)
    query = data.get("query") or {}
    randoms = query.get("random") if isinstance(query, dict) else None
    if not randoms:
        raise TrainingError("no random article returned")
    first = randoms[0]
    return str(first.get("title", "")) if isinstance(first, dict) else ""


def fetch_wikipedia_text(lang: str, article: str) -> str:
    """Return the plain-text extract of a Wikipedia article."""
    url = (
        f"https://{lang}.wikipedia.org/w/api.php?action=query"
        f"&titles={urllib.parse.quote_plus(article)}"
        "&prop=extracts&explaintext=true&format=json"
    )
    status, body = _get(url)
    if status != 200:
        raise TrainingError(f"Wikipedia API returned {status}")

    data = _decode_json(body)
    query = data.get("query") or {}
    pages = query.get("pages") if isinstance(query, dict) else None
    if not isinstance(pages, dict) or not pages:
        raise TrainingError("no pages in response")

    page_id, page = next(iter(pages.items()))
    if page_id == "-1":
        raise TrainingError(f"article not found: {article}")
    page = page if isinstance(page, dict) else {}
    extract = page.get("extract") or ""
    if not extract:
        raise TrainingError(f"empty extract for: {article}")
    log.info("Fetched Wikipedia article: %s", page.get("title", ""))
    return extract


def train_from_wikipedia(model: Model, lang: str, article: str) -> int:
    """Fetch an article, learn its sentences and return how many were learned."""
    text = clean_wikipedia_text(fetch_wikipedia_text(lang, article))
    count = 0
    for sentence in split_sentences(text):
        sentence = sentence.strip()
        if not sentence:
            continue
        model.learn(sentence)
        count += 1
    return count


def handle_train(model: Model, source: str) -> str:
    """Train from a chat ``!TRAIN=`` source and return a message for the user."""
    if source.startswith("wiki:"):
        lang, article = parse_wiki_shorthand(source[len("wiki:"):])
    elif is_wikipedia_url(source):
        lang, article = extract_wiki_article(source)
        if not article:
            return f"Could not parse Wikipedia article from: {source}"
    else:
        return UNSUPPORTED_SOURCE

    if article.lower() == "random":
        try:
            article = fetch_random_article(lang)
        except TrainingError as exc:
            return f"Failed to get random article: {exc}"

    try:
        count = train_from_wikipedia(model, lang, article)
    except TrainingError as exc:
        return f"Training failed: {exc}"
    return (
        f"Trained {count} sentences from {lang}:{article}. "
        f"Brain now has {len(model.dictionary)} words."
    )