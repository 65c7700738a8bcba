import os

import pytest

from svetse.brain import BrainFormatError, load_brain, save_brain
from svetse.model import Model

SENTENCES = [
    "The cat sat on the mat and looked at the birds",
    "The dog ran through the park chasing the ball",
    "Birds fly over the mountains and rivers below",
    "Hello world this is a test of the brain save system",
]


def _same_tree(a, b):
    return (
        (a.symbol, a.usage, a.count) == (b.symbol, b.usage, b.count)
        and len(a.children) == len(b.children)
        and all(_same_tree(x, y) for x, y in zip(a.children, b.children))
    )


def test_save_and_load(tmp_path):
    model = Model(5)
    for sentence in SENTENCES:
        model.learn(sentence)
    path = tmp_path / "test.brain"
    save_brain(path, model)
    assert path.stat().st_size > 0

    loaded = load_brain(path)
    assert loaded.dictionary == model.dictionary
    for word, symbol in model.word_ids.items():
        assert loaded.word_ids[word] == symbol
    assert loaded.order == model.order
    assert loaded.forward.children
    assert loaded.backward.children
    assert loaded.forward.usage == model.forward.usage
    assert _same_tree(loaded.forward, model.forward)
    assert _same_tree(loaded.backward, model.backward)


def test_save_atomicity(tmp_path):
    model = Model(5)
    model.learn("The cat sat on the mat and purred loudly")
    path = tmp_path / "test.brain"
    save_brain(path, model)
    first = path.stat().st_size

    model.learn("The dog barked at the mailman every single morning")
    save_brain(path, model)
    assert path.stat().st_size > first
    assert os.listdir(tmp_path) == ["test.brain"]


def test_empty_model_layout(tmp_path):
    path = tmp_path / "empty.brain"
    save_brain(path, Model(2))
    expected = (
        b"SVETSE2v1"
        + b"\x02"
        + b"\x00" * 16 * 2
        + b"\x01\x00\x00\x00"
        + b"\x00\x00\x00\x00"
    )
    assert path.read_bytes() == expected


def test_load_missing():
    with pytest.raises(OSError):
        load_brain("/nonexistent/path/brain.bin")


def test_load_corrupt(tmp_path):
    path = tmp_path / "corrupt.brain"
    path.write_bytes(b"not a brain file")
    with pytest.raises(BrainFormatError):
        load_brain(path)


def test_load_truncated(tmp_path):
    model = Model(5)
    model.learn("hello world")
    path = tmp_path / "full.brain"
    save_brain(path, model)
    data = path.read_bytes()
    truncated = tmp_path / "short.brain"
    truncated.write_bytes(data[:-3])
    with pytest.raises(BrainFormatError):
        load_brain(truncated)


def test_loaded_model_keeps_learning(tmp_path):
    model = Model(5)
    model.learn("hello world")
    path = tmp_path / "b.brain"
    save_brain(path, model)
    loaded = load_brain(path)
    loaded.learn("hello there")
    assert loaded.find_word("HELLO") == model.find_word("HELLO")
    assert loaded.find_word("THERE") == len(model.dictionary)