import re
import time

import pytest

from svetse.brain import load_brain, save_brain
from svetse.config import help_text, load_config
from svetse.generation import FALLBACK_REPLY
from svetse.model import Model
from svetse.service import TIMEOUT_REPLY, BrainService
from svetse.training import UNSUPPORTED_SOURCE

CORPUS = [
    "The cat sat on the mat and looked at the birds",
    "The dog ran through the park chasing the ball",
    "Birds fly over the mountains and rivers below",
    "The cat chased the dog around the park today",
]


def _config(tmp_path, **extra):
    env = {
        "SVETSE2_BRAIN_PATH": str(tmp_path / "brain.bin"),
        "SVETSE2_BAN_FILE": str(tmp_path / "megahal.ban"),
        "SVETSE2_AUX_FILE": str(tmp_path / "megahal.aux"),
        "SVETSE2_SWP_FILE": str(tmp_path / "megahal.swp"),
        "SVETSE2_REPLY_TIMEOUT": "100ms",
    }
    env.update(extra)
    return load_config(env)


def test_reply_before_start_raises(tmp_path):
    service = BrainService(_config(tmp_path))
    with pytest.raises(RuntimeError):
        service.reply("hello")


def test_start_twice_raises(tmp_path):
    with BrainService(_config(tmp_path)) as service:
        with pytest.raises(RuntimeError):
            service.start()


def test_invalid_save_interval_rejected(tmp_path):
    service = BrainService(_config(tmp_path, SVETSE2_SAVE_INTERVAL="0"))
    with pytest.raises(ValueError):
        service.start()


def test_learn_then_stop_saves_brain(tmp_path):
    config = _config(tmp_path)
    service = BrainService(config)
    service.start()
    for sentence in CORPUS:
        service.learn(sentence)
    service.stop()
    assert service.running is False
    loaded = load_brain(config.brain_path)
    assert "CAT" in loaded.dictionary
    assert "MOUNTAINS" in loaded.dictionary
    assert loaded.dictionary == service.model.dictionary


def test_empty_brain_reply_is_fallback(tmp_path):
    with BrainService(_config(tmp_path)) as service:
        assert service.reply("hello") == FALLBACK_REPLY


def test_reply_uses_learned_words(tmp_path):
    corpus_words = {word.lower() for sentence in CORPUS for word in sentence.split()}
    with BrainService(_config(tmp_path)) as service:
        for sentence in CORPUS:
            service.learn(sentence)
        reply = service.reply("cat", {"TIMEOUT": "50ms"})
    words = re.findall(r"[a-z']+", reply.lower())
    assert words
    assert set(words) <= corpus_words


def test_help_matches_help_text(tmp_path):
    config = _config(tmp_path, SVETSE2_CHAOS="2.5")
    with BrainService(config) as service:
        assert service.help() == help_text(config.default_config)


def test_train_unsupported_source(tmp_path):
    with BrainService(_config(tmp_path)) as service:
        assert service.train("ftp://example.com/file") == UNSUPPORTED_SOURCE


def test_train_unparseable_url(tmp_path):
    source = "https://en.wikipedia.org/wiki/"
    with BrainService(_config(tmp_path)) as service:
        assert service.train(source) == f"Could not parse Wikipedia article from: {source}"


def test_existing_brain_loaded(tmp_path):
    config = _config(tmp_path)
    model = Model()
    model.learn("Hello brave new world")
    save_brain(config.brain_path, model)
    with BrainService(config) as service:
        pass
    assert service.model.dictionary == model.dictionary
    assert service.model.find_word("BRAVE") == model.find_word("BRAVE")


def test_save_while_running(tmp_path):
    config = _config(tmp_path)
    with BrainService(config) as service:
        service.learn("Hello brave new world")
        assert service.save() is True
        assert (tmp_path / "brain.bin").exists()


def test_save_failure_returns_false(tmp_path):
    config = _config(tmp_path, SVETSE2_BRAIN_PATH=str(tmp_path / "missing" / "brain.bin"))
    with BrainService(config) as service:
        assert service.save() is False


def test_periodic_save(tmp_path):
    config = _config(tmp_path, SVETSE2_SAVE_INTERVAL="50ms")
    path = tmp_path / "brain.bin"
    with BrainService(config) as service:
        service.learn("Hello brave new world")
        deadline = time.monotonic() + 5.0
        while not path.exists() and time.monotonic() < deadline:
            time.sleep(0.02)
        assert path.exists()


def test_hard_timeout_gives_timeout_reply(tmp_path):
    config = _config(tmp_path, SVETSE2_REPLY_TIMEOUT="1s")
    with BrainService(config, reply_hard_timeout=0.05) as service:
        for sentence in CORPUS:
            service.learn(sentence)
        assert service.reply("cat") == TIMEOUT_REPLY