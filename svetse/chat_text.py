"""Cleaning of chat-platform markup from incoming message text."""

from __future__ import annotations

import re

_DISCORD_MENTION_RE = re.compile(r"<@!?[0-9]+>")

_SLACK_CHANNEL_RE = re.compile(r"<#[A-Z0-9]+\|([^>]+)>")
_SLACK_LABELLED_LINK_RE = re.compile(r"<(https?://[^|>]+)\|([^>]+)>")
_SLACK_LINK_RE = re.compile(r"<(https?://[^>]+)>")
_SLACK_MENTION_RE = re.compile(r"<@[A-Z0-9]+>")


def _collapse(text: str) -> str:
    return " ".join(text.split())


def clean_discord_text(text: str) -> str:
    """Remove user mentions and collapse whitespace."""
    return _collapse(_DISCORD_MENTION_RE.sub("", text))


def clean_slack_text(text: str) -> str:
    """Unwrap channel and link markup, drop mentions, collapse whitespace."""
    text = _SLACK_CHANNEL_RE.sub(r"\1", text)
    text = _SLACK_LABELLED_LINK_RE.sub(r"\2", text)
    text = _SLACK_LINK_RE.sub(r"\1", text)
    text = _SLACK_MENTION_RE.sub("", text)
    return _collapse(text)