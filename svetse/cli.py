"""Command line entry point: run the bot or train its brain."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from collections.abc import Mapping, Sequence
from typing import Optional

from .brain import BrainFormatError, load_brain, save_brain
from .config import DEFAULT_BRAIN_PATH, env_or_default, load_config
from .model import Model
from .service import BrainService
from .training import (
    TrainingError,
    extract_wiki_article,
    fetch_random_article,
    is_wikipedia_url,
    parse_wiki_shorthand,
    train_from_file,
    train_from_wikipedia,
)

log = logging.getLogger(__name__)

TRAIN_USAGE = """Usage: svetse2 train [sources...]

Sources can be:
  file.txt                    - Train from a text file (one sentence per line)
  https://LANG.wikipedia.org/wiki/Article  - Fetch and train from a Wikipedia article
  wiki:Article_Name           - Shorthand for Wikipedia article

Options (via environment variables):
  SVETSE2_BRAIN_PATH  - Brain file path (default: ./brain.bin)"""


def _train_source(model: Model, source: str) -> Optional[int]:
    if source.startswith("wiki:"):
        lang, article = parse_wiki_shorthand(source[len("wiki:"):])
    elif is_wikipedia_url(source):
        lang, article = extract_wiki_article(source)
        if not article:
            log.warning("Could not parse Wikipedia article from URL: %s", source)
            return None
    else:
        return train_from_file(model, source)

    if article.casefold() == "random":
        try:
            article = fetch_random_article(lang)
        except TrainingError as exc:
            log.warning("Failed to get random article: %s", exc)
            return None
        log.info("Random article: %s:%s", lang, article)
    return train_from_wikipedia(model, lang, article)


def run_train(args: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> int:
    """Train the brain from files and Wikipedia sources; return an exit status."""
    if not args:
        print(TRAIN_USAGE, file=sys.stderr)
        return 1

    brain_path = env_or_default("SVETSE2_BRAIN_PATH", DEFAULT_BRAIN_PATH, environ)
    try:
        model = load_brain(brain_path)
    except (OSError, BrainFormatError) as exc:
        log.info("No existing brain loaded (starting fresh): %s", exc)
        model = Model(5)
    else:
        log.info("Loaded existing brain: %d words in dictionary", len(model.dictionary))

    total = 0
    for source in args:
        try:
            count = _train_source(model, source)
        except (TrainingError, OSError) as exc:
            log.warning("Error training from %s: %s", source, exc)
            continue
        if count is None:
            continue
        log.info("Trained %d sentences from %s", count, source)
        total += count

    if total == 0:
        log.info("No sentences learned, not saving")
        return 0

    try:
        save_brain(brain_path, model)
    except OSError as exc:
        log.error("Error saving brain: %s", exc)
        return 1
    log.info(
        "Brain saved: %d words in dictionary, %d sentences trained",
        len(model.dictionary),
        total,
    )
    return 0


def _wait_for_shutdown() -> None:
    stop = threading.Event()

    def handler(signum: int, frame: object) -> None:
        stop.set()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        while not stop.wait(1.0):
            pass
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run ``train`` or the bot's brain service until interrupted."""
    args = list(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    if args and args[0] == "train":
        return run_train(args[1:])

    config = load_config()
    if not config.slack_token and not config.discord_token:
        log.error("At least one of SVETSE2_SLACK_TOKEN or SVETSE2_DISCORD_TOKEN must be set")
        return 1

    service = BrainService(config)
    service.start()
    log.info("SVETSE2 running. Press Ctrl+C to stop.")
    try:
        _wait_for_shutdown()
    finally:
        log.info("Shutting down...")
        service.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())