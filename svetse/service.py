"""The brain service: one worker thread that owns the model."""

from __future__ import annotations

import concurrent.futures
import logging
import queue
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any, Optional

from .brain import BrainFormatError, load_brain, save_brain
from .config import Config, help_text
from .generation import generate_reply
from .model import Model
from .overrides import apply_overrides
from .training import handle_train
from .wordlists import load_swap_list, load_word_list

log = logging.getLogger(__name__)

TIMEOUT_REPLY = "Brain timed out generating a reply."

_STOP = object()


def _fill(future: concurrent.futures.Future, fn: Callable[..., Any], *args: Any) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = fn(*args)
    except Exception as exc:
        future.set_exception(exc)
    else:
        future.set_result(result)


class BrainService:
    """Serialises learning, replying, training and saving on one thread.

    Requests are queued and handled in order. The brain is saved every
    ``config.save_interval`` seconds and once more when the service stops.
    """

    def __init__(
        self,
        config: Config,
        *,
        order: int = 5,
        heartbeat_interval: float = 30.0,
        reply_hard_timeout: float = 60.0,
    ) -> None:
        self.config = config
        self.model = Model(order)
        self.heartbeat_interval = heartbeat_interval
        self.reply_hard_timeout = reply_hard_timeout
        self._ban: set[str] = set()
        self._aux: set[str] = set()
        self._swaps: dict[str, str] = {}
        self._queue: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """True while the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> BrainService:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        """Load word lists and the brain, then start the worker thread."""
        if self._thread is not None:
            raise RuntimeError("brain service already started")
        if self.config.save_interval <= 0:
            raise ValueError("save interval must be positive")
        self._ban = load_word_list(self.config.ban_file)
        self._aux = load_word_list(self.config.aux_file)
        self._swaps = load_swap_list(self.config.swp_file)
        try:
            self.model = load_brain(self.config.brain_path)
        except (OSError, BrainFormatError) as exc:
            log.info("No existing brain loaded: %s", exc)
        else:
            log.info("Brain loaded: %d words in dictionary", len(self.model.dictionary))
        self._thread = threading.Thread(target=self._run, name="brain", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Save the brain and stop the worker; does nothing if not started."""
        thread = self._thread
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join()
        self._thread = None

    def save(self) -> bool:
        """Save the brain now; return False if writing failed."""
        if self.running:
            return self._submit(self._save).result()
        return self._save()

    def learn(self, text: str) -> None:
        """Queue *text* to be learned."""
        self._submit(self._learn, text)

    def reply(self, text: str, overrides: Optional[Mapping[str, str]] = None) -> str:
        """Generate a reply to *text* with optional per-message overrides."""
        return self._submit(self._reply, text, dict(overrides or {})).result()

    def help(self) -> str:
        """Return the help message for the configured defaults."""
        return help_text(self.config.default_config)

    def train(self, source: str) -> str:
        """Train from a ``!TRAIN=`` source and return the message for the user."""
        return self._submit(self._train, source).result()

    def _submit(self, fn: Callable[..., Any], *args: Any) -> concurrent.futures.Future:
        if not self.running:
            raise RuntimeError("brain service is not running")
        future: concurrent.futures.Future = concurrent.futures.Future()
        self._queue.put((future, fn, args))
        return future

    def _learn(self, text: str) -> None:
        self.model.learn(text)

    def _train(self, source: str) -> str:
        return handle_train(self.model, source)

    def _reply(self, text: str, overrides: dict[str, str]) -> str:
        config = apply_overrides(self.config.default_config, overrides)
        future: concurrent.futures.Future = concurrent.futures.Future()
        worker = threading.Thread(
            target=_fill,
            args=(future, generate_reply, self.model, text, self._ban, self._aux, self._swaps, config),
            name="brain-reply",
            daemon=True,
        )
        worker.start()
        try:
            return future.result(timeout=self.reply_hard_timeout)
        except concurrent.futures.TimeoutError:
            log.warning("generate_reply timed out for input %r", text)
            return TIMEOUT_REPLY

    def _save(self) -> bool:
        try:
            save_brain(self.config.brain_path, self.model)
        except OSError as exc:
            log.error("Error saving brain: %s", exc)
            return False
        log.info("Brain saved: %d words in dictionary", len(self.model.dictionary))
        return True

    def _run(self) -> None:
        now = time.monotonic()
        next_save = now + self.config.save_interval
        next_beat = now + self.heartbeat_interval
        while True:
            wait = max(0.0, min(next_save, next_beat) - time.monotonic())
            try:
                item = self._queue.get(timeout=wait)
            except queue.Empty:
                pass
            else:
                if item is _STOP:
                    self._save()
                    break
                _fill(*item[:2], *item[2])
            now = time.monotonic()
            if now >= next_beat:
                log.info(
                    "heartbeat: dict=%d queue=%d",
                    len(self.model.dictionary),
                    self._queue.qsize(),
                )
                next_beat = now + self.heartbeat_interval
            if now >= next_save:
                self._save()
                next_save = now + self.config.save_interval
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                item[0].cancel()