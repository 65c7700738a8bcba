"""Per-message ``!KEY=VALUE`` overrides embedded in chat text."""

from __future__ import annotations

import dataclasses
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from .durations import parse_duration
from .generation import GenerationConfig

_OVERRIDE_RE = re.compile(
    r"!(CHAOS|TEMPERATURE|SURPRISE_BIAS|TIMEOUT|HELP|TRAIN)(?:=([^\t\n\f\r ]+))?",
    re.IGNORECASE,
)
_MAX_TIMEOUT = 30.0
_FLOAT_RE = re.compile(
    r"[-+]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


@dataclass
class ParsedMessage:
    """A chat message with its override directives taken out."""

    text: str = ""
    overrides: dict[str, str] = field(default_factory=dict)
    help: bool = False
    train_url: str = ""


def parse_overrides(text: str) -> ParsedMessage:
    """Strip ``!KEY[=VALUE]`` directives from *text* and collect them."""
    result = ParsedMessage()

    def consume(match: re.Match[str]) -> str:
        key = match.group(1).upper()
        value = match.group(2) or ""
        if key == "HELP":
            result.help = True
        elif key == "TRAIN":
            if value:
                result.train_url = value
        elif value:
            result.overrides[key] = value
        return ""

    cleaned = _OVERRIDE_RE.sub(consume, text)
    result.text = " ".join(cleaned.split())
    return result


def _positive_float(value: str) -> float | None:
    if not _FLOAT_RE.fullmatch(value):
        return None
    number = float(value)
    if math.isnan(number) or number <= 0:
        return None
    return number


def apply_overrides(base: GenerationConfig, overrides: Mapping[str, str]) -> GenerationConfig:
    """Return *base* with valid overrides applied; invalid values are ignored.

    CHAOS sets both temperature and surprise bias; TEMPERATURE and
    SURPRISE_BIAS then take precedence. TIMEOUT is capped at 30 seconds.
    """
    config = base
    if "CHAOS" in overrides:
        chaos = _positive_float(overrides["CHAOS"])
        if chaos is not None:
            config = dataclasses.replace(config, temperature=chaos, surprise_bias=chaos)
    if "TEMPERATURE" in overrides:
        temperature = _positive_float(overrides["TEMPERATURE"])
        if temperature is not None:
            config = dataclasses.replace(config, temperature=temperature)
    if "SURPRISE_BIAS" in overrides:
        bias = _positive_float(overrides["SURPRISE_BIAS"])
        if bias is not None:
            config = dataclasses.replace(config, surprise_bias=bias)
    if "TIMEOUT" in overrides:
        try:
            timeout = parse_duration(overrides["TIMEOUT"])
        except ValueError:
            timeout = 0.0
        if timeout > 0:
            config = dataclasses.replace(config, reply_timeout=min(timeout, _MAX_TIMEOUT))
    return config