"""Localized message lookup.

Messages live in YAML files named `active.<lang>.yaml`, each mapping a
message ID to its text in that language.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
DEFAULT_ACCEPT_LANGUAGE = "en-US"


class MessageNotFound(KeyError):
    """Raised when no bundle defines a message ID."""


def preferred_language(accept_language: str | None) -> str:
    """First language tag of an Accept-Language header, e.g. "es-ES"."""
    tag = (accept_language or "").split(",")[0].split(";")[0].strip()
    return tag or DEFAULT_ACCEPT_LANGUAGE


class MessageBundle:
    """Messages for every language found in a directory."""

    def __init__(self, messages: dict[str, dict[str, str]]):
        self.messages = messages

    @classmethod
    def load(cls, directory: Path) -> "MessageBundle":
        messages = {}
        for path in sorted(Path(directory).glob("active.*.yaml")):
            lang = path.name[len("active."):-len(".yaml")].lower()
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            messages[lang] = {str(k): str(v) for k, v in data.items()}
            logger.info("Loaded %d messages for %s from %s", len(data), lang, path)
        if DEFAULT_LANGUAGE not in messages:
            raise FileNotFoundError(f"No active.{DEFAULT_LANGUAGE}.yaml message file in {directory}")
        return cls(messages)

    def resolve_language(self, tag: str) -> str:
        """Pick the bundle language for a tag: exact match, base language, then English."""
        tag = tag.lower()
        if tag in self.messages:
            return tag
        base = tag.split("-")[0]
        if base in self.messages:
            return base
        return DEFAULT_LANGUAGE

    def localize(self, message_id: str, tag: str = DEFAULT_ACCEPT_LANGUAGE) -> str:
        lang = self.resolve_language(tag)
        for candidate in (lang, DEFAULT_LANGUAGE):
            msg = self.messages.get(candidate, {}).get(message_id)
            if msg is not None:
                return msg
        raise MessageNotFound(message_id)
