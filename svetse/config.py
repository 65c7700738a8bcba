"""Runtime configuration read from ``SVETSE2_*`` environment variables."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from .durations import parse_duration
from .generation import GenerationConfig

DEFAULT_BRAIN_PATH = "./brain.bin"
DEFAULT_BAN_FILE = "./megahal.ban"
DEFAULT_AUX_FILE = "./megahal.aux"
DEFAULT_SWP_FILE = "./megahal.swp"
DEFAULT_SAVE_INTERVAL = 5 * 60.0
DEFAULT_REPLY_TIMEOUT = 2.0

_ENV_SLACK = "SVETSE2_SLACK_TOKEN"
_ENV_SLACK_APP = "SVETSE2_SLACK_APP_TOKEN"
_ENV_DISCORD = "SVETSE2_DISCORD_TOKEN"

_FLOAT_PREFIX_RE = re.compile(
    r"\s*([-+]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|inf|nan))",
    re.IGNORECASE,
)

_NS_PER_SECOND = 1_000_000_000


@dataclass
class Config:
    """Settings of the chat bot; durations are in seconds."""

    slack_token: str = field(default_factory=str)
    slack_app_token: str = field(default_factory=str)
    discord_token: str = field(default_factory=str)
    slack_channels: list[str] = field(default_factory=list)
    discord_channels: list[str] = field(default_factory=list)
    brain_path: str = DEFAULT_BRAIN_PATH
    save_interval: float = DEFAULT_SAVE_INTERVAL
    ban_file: str = DEFAULT_BAN_FILE
    aux_file: str = DEFAULT_AUX_FILE
    swp_file: str = DEFAULT_SWP_FILE
    default_config: GenerationConfig = field(default_factory=GenerationConfig)


def _env(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _get(env: Mapping[str, str], name: str) -> str:
    """Return variable *name*, or an empty string when it is unset."""
    return env.get(name) or str()


def env_or_default(key: str, default: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the variable *key*, or *default* when it is unset or empty."""
    return _env(environ).get(key) or default


def parse_float_env(
    key: str, default: float, environ: Optional[Mapping[str, str]] = None
) -> float:
    """Return the number at the start of variable *key*, else *default*."""
    value = _get(_env(environ), key)
    if not value:
        return default
    match = _FLOAT_PREFIX_RE.match(value)
    if match is None:
        return default
    try:
        return float(match.group(1))
    except ValueError:
        return default


def parse_duration_env(
    key: str, default: float, environ: Optional[Mapping[str, str]] = None
) -> float:
    """Return variable *key* parsed as a duration in seconds, else *default*."""
    value = _get(_env(environ), key)
    if not value:
        return default
    try:
        return parse_duration(value)
    except ValueError:
        return default


def _channels(value: str) -> list[str]:
    return [part.strip() for part in value.split(",")] if value else []


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a :class:`Config` from the environment."""
    env = _env(environ)
    chaos = parse_float_env("SVETSE2_CHAOS", 1.0, env)
    return Config(
        slack_token=_get(env, _ENV_SLACK),
        slack_app_token=_get(env, _ENV_SLACK_APP),
        discord_token=_get(env, _ENV_DISCORD),
        slack_channels=_channels(_get(env, "SVETSE2_SLACK_CHANNELS")),
        discord_channels=_channels(_get(env, "SVETSE2_DISCORD_CHANNELS")),
        brain_path=env_or_default("SVETSE2_BRAIN_PATH", DEFAULT_BRAIN_PATH, env),
        save_interval=parse_duration_env("SVETSE2_SAVE_INTERVAL", DEFAULT_SAVE_INTERVAL, env),
        ban_file=env_or_default("SVETSE2_BAN_FILE", DEFAULT_BAN_FILE, env),
        aux_file=env_or_default("SVETSE2_AUX_FILE", DEFAULT_AUX_FILE, env),
        swp_file=env_or_default("SVETSE2_SWP_FILE", DEFAULT_SWP_FILE, env),
        default_config=GenerationConfig(
            temperature=parse_float_env("SVETSE2_TEMPERATURE", chaos, env),
            surprise_bias=parse_float_env("SVETSE2_SURPRISE_BIAS", chaos, env),
            reply_timeout=parse_duration_env("SVETSE2_REPLY_TIMEOUT", DEFAULT_REPLY_TIMEOUT, env),
        ),
    )


def _fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(rest).zfill(digits).rstrip('0')}"


def _format_duration(seconds: float) -> str:
    nanoseconds = round(seconds * _NS_PER_SECOND)
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)
    if nanoseconds == 0:
        return "0s"
    if nanoseconds < 1_000:
        return f"{sign}{nanoseconds}ns"
    if nanoseconds < 1_000_000:
        return f"{sign}{_fraction(nanoseconds, 1_000)}µs"
    if nanoseconds < _NS_PER_SECOND:
        return f"{sign}{_fraction(nanoseconds, 1_000_000)}ms"
    hours, rest = divmod(nanoseconds, 3600 * _NS_PER_SECOND)
    minutes, rest = divmod(rest, 60 * _NS_PER_SECOND)
    secs = _fraction(rest, _NS_PER_SECOND) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}"
    if minutes:
        return f"{sign}{minutes}m{secs}"
    return sign + secs


def help_text(config: GenerationConfig) -> str:
    """Return the chat help message showing the defaults of *config*."""
    return (
        "SVETSE2 — MegaHAL Markov chain bot\n\n"
        "Usage: @bot <message> [!KEY=VALUE...]\n\n"
        "Per-message overrides:\n"
        f"  !CHAOS=X          Combined chaos dial (default: {config.temperature:.1f})\n"
        f"  !TEMPERATURE=X    Random walk temperature (default: {config.temperature:.1f})\n"
        f"  !SURPRISE_BIAS=X  Surprise scoring exponent (default: {config.surprise_bias:.1f})\n"
        f"  !TIMEOUT=Xs       Reply generation time "
        f"(default: {_format_duration(config.reply_timeout)}, max: 30s)\n"
        "  !TRAIN=URL        Train from Wikipedia (wiki:Article or full URL)\n"
        "  !HELP             Show this message\n\n"
        "Higher CHAOS = wilder, more unhinged replies."
    )