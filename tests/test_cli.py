from svetse.brain import load_brain
from svetse.cli import main, run_train

CORPUS = """The cat sat on the mat and looked around the room.
The dog ran through the park and chased the birds away.
# SKIPPED comment line should be ignored.
Birds fly high over the mountains and rivers below.
"""


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_usage_without_sources(capsys):
    assert run_train([], {}) == 1
    assert "Usage: svetse2 train" in capsys.readouterr().err


def test_train_file_creates_brain(tmp_path):
    corpus = _write(tmp_path / "corpus.txt", CORPUS)
    brain = tmp_path / "brain.bin"
    assert run_train([str(corpus)], {"SVETSE2_BRAIN_PATH": str(brain)}) == 0
    model = load_brain(brain)
    assert "CAT" in model.dictionary
    assert "MOUNTAINS" in model.dictionary
    assert "SKIPPED" not in model.dictionary


def test_missing_file_does_not_save(tmp_path):
    brain = tmp_path / "brain.bin"
    code = run_train([str(tmp_path / "nope.txt")], {"SVETSE2_BRAIN_PATH": str(brain)})
    assert code == 0
    assert not brain.exists()


def test_unparseable_wikipedia_url_is_skipped(tmp_path):
    brain = tmp_path / "brain.bin"
    code = run_train(["https://en.wikipedia.org/wiki/"], {"SVETSE2_BRAIN_PATH": str(brain)})
    assert code == 0
    assert not brain.exists()


def test_training_accumulates(tmp_path):
    brain = tmp_path / "brain.bin"
    env = {"SVETSE2_BRAIN_PATH": str(brain)}
    first = _write(tmp_path / "a.txt", "The cat sat on the mat.\n")
    second = _write(tmp_path / "b.txt", "Giraffes eat leaves from tall trees.\n")
    assert run_train([str(first)], env) == 0
    before = load_brain(brain).dictionary
    assert run_train([str(second)], env) == 0
    after = load_brain(brain).dictionary
    assert after[: len(before)] == before
    assert "GIRAFFES" in after
    assert "GIRAFFES" not in before


def test_corrupt_brain_starts_fresh(tmp_path):
    brain = tmp_path / "brain.bin"
    brain.write_bytes(b"not a brain file")
    corpus = _write(tmp_path / "corpus.txt", CORPUS)
    assert run_train([str(corpus)], {"SVETSE2_BRAIN_PATH": str(brain)}) == 0
    model = load_brain(brain)
    assert model.dictionary[0] == ""
    assert "BIRDS" in model.dictionary


def test_save_failure_returns_error(tmp_path):
    corpus = _write(tmp_path / "corpus.txt", CORPUS)
    brain = tmp_path / "missing" / "brain.bin"
    assert run_train([str(corpus)], {"SVETSE2_BRAIN_PATH": str(brain)}) == 1


def test_main_train_without_sources():
    assert main(["train"]) == 1


def test_main_train_routes_to_training(tmp_path, monkeypatch):
    corpus = _write(tmp_path / "corpus.txt", CORPUS)
    brain = tmp_path / "brain.bin"
    monkeypatch.setenv("SVETSE2_BRAIN_PATH", str(brain))
    assert main(["train", str(corpus)]) == 0
    assert "DOG" in load_brain(brain).dictionary


def test_main_requires_a_token(monkeypatch):
    monkeypatch.delenv("SVETSE2_SLACK_TOKEN", raising=False)
    monkeypatch.delenv("SVETSE2_DISCORD_TOKEN", raising=False)
    assert main([]) == 1