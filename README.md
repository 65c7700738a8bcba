# svetse

A MegaHAL-style Markov chain chat bot brain. It learns sentences into forward
and backward context trees, then builds replies around keywords taken from
what it is told, keeping the most surprising candidate found within a time
limit. Its memory lives in a single binary "brain" file that is saved
atomically (written to a temporary file, then renamed into place).

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Training a brain from the command line

```
svetse train corpus.txt
svetse train wiki:Albert_Einstein
svetse train wiki:sv:Prinsesstårta
svetse train wiki:random
svetse train https://en.wikipedia.org/wiki/Cat
```

Sources can be mixed in one call:

- a text file, one sentence per line; empty lines and lines starting with `#`
  are skipped, and a line of one mebibyte or more makes that file fail;
- `wiki:Article` or `wiki:lang:Article` (a language prefix of at most three
  bytes), fetched through the Wikipedia API; `random` picks a random article;
- a full Wikipedia article URL; the language is taken from the host name and
  `Special:` pages count as a random article.

A source that fails is logged and skipped. An existing brain is loaded first
and extended; a missing or unreadable brain starts a fresh one. The brain is
saved only if at least one sentence was learned. Called without sources,
`svetse train` prints its usage and exits with status 1.

## Running the bot

```
svetse
```

Without `train`, the command reads its settings from the environment, refuses
to start (exit status 1) unless `SVETSE2_SLACK_TOKEN` or
`SVETSE2_DISCORD_TOKEN` is set, then runs a `BrainService`: the brain is
loaded, saved every `SVETSE2_SAVE_INTERVAL`, and saved once more on Ctrl+C or
SIGTERM.

### Environment

| Variable | Meaning | Default |
| --- | --- | --- |
| `SVETSE2_SLACK_TOKEN`, `SVETSE2_SLACK_APP_TOKEN` | Slack credentials | unset |
| `SVETSE2_DISCORD_TOKEN` | Discord credential | unset |
| `SVETSE2_SLACK_CHANNELS`, `SVETSE2_DISCORD_CHANNELS` | comma-separated channel lists | empty |
| `SVETSE2_BRAIN_PATH` | brain file path | `./brain.bin` |
| `SVETSE2_BAN_FILE` | words never used as keywords | `./megahal.ban` |
| `SVETSE2_AUX_FILE` | auxiliary keywords | `./megahal.aux` |
| `SVETSE2_SWP_FILE` | swap pairs, one word per line | `./megahal.swp` |
| `SVETSE2_SAVE_INTERVAL` | how often the brain is saved | `5m` |
| `SVETSE2_CHAOS` | default for both temperature and surprise bias | `1.0` |
| `SVETSE2_TEMPERATURE` | random-walk temperature | chaos |
| `SVETSE2_SURPRISE_BIAS` | surprise scoring exponent | chaos |
| `SVETSE2_REPLY_TIMEOUT` | time spent searching for a reply | `2s` |

Durations use the `300ms`, `2s`, `5m`, `1h30m` form
(`svetse.durations.parse_duration`, which returns seconds). Invalid values
fall back to the defaults. `svetse.config.load_config` builds a `Config` from
these variables.

### What it does not do

The package has no Slack or Discord client. The tokens and channel lists are
read into `Config`, and the `svetse` command checks that a token is present,
but nothing connects to a chat platform, receives messages or posts replies.
A chat adapter has to be written on top of `BrainService`, `parse_overrides`
and the `svetse.chat_text` helpers.

## Per-message overrides

A message sent to the bot may carry settings that apply to that reply only:

```
tell me about cats !CHAOS=2.5 !TIMEOUT=5s
```

- `!CHAOS=X` sets temperature and surprise bias together
- `!TEMPERATURE=X`, `!SURPRISE_BIAS=X` (applied after `!CHAOS`)
- `!TIMEOUT=Xs`, capped at 30 seconds
- `!TRAIN=wiki:Article` or a Wikipedia URL asks for training
- `!HELP` asks for the help text

Keys are case-insensitive. `svetse.overrides.parse_overrides` strips these
from the text and returns a `ParsedMessage` with `text`, `overrides`, `help`
and `train_url`; `svetse.overrides.apply_overrides` folds the overrides into a
`GenerationConfig`, ignoring values that are not positive numbers or
durations.

## Using the library

```python
from svetse.model import Model
from svetse.tokens import make_words
from svetse.brain import save_brain, load_brain
from svetse.generation import GenerationConfig, generate_reply
from svetse.wordlists import load_word_list, load_swap_list

model = Model()
model.learn("The cat sat on the mat and looked at the birds")
save_brain("brain.bin", model)
model = load_brain("brain.bin")

ban = load_word_list("megahal.ban")
aux = load_word_list("megahal.aux")
swaps = load_swap_list("megahal.swp")
config = GenerationConfig(temperature=1.0, surprise_bias=1.0, reply_timeout=1.0)
print(generate_reply(model, "cat", ban, aux, swaps, config))

print(make_words("Hello, world!"))  # ['HELLO', ', ', 'WORLD', '!']
```

- `load_brain` raises `OSError` when the file cannot be read and
  `svetse.brain.BrainFormatError` when its contents are not a valid brain.
- `generate_reply` returns the best reply found, or
  "I don't know enough to answer you yet!" when the brain knows too little.
- Missing word-list files give an empty set or mapping.
- `svetse.training` offers `train_from_file`, `train_from_wikipedia`,
  `handle_train` (returns a message for a chat user) and the text helpers
  `clean_wikipedia_text` and `split_sentences`; fetch failures raise
  `TrainingError`.

`svetse.service.BrainService(config)` owns one model on a worker thread and
handles requests in order: `learn` (queued), `reply`, `train`, `help` and
`save`. It is started with `start()` or used as a context manager, and
`stop()` saves the brain before the thread ends. A reply that takes longer
than a minute gives "Brain timed out generating a reply."

`svetse.chat_text.clean_slack_text` and `clean_discord_text` remove mention
markup, unwrap Slack channel and link markup, and collapse whitespace.