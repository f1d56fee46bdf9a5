"""Localized message lookup keyed by error kind."""

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, ConfigDict


logger = structlog.get_logger()

LOCALES_DIR = Path(__file__).parent / "locales"
DEFAULT_LANGUAGE = "en"


class Message(BaseModel):
    """A localized message and its severity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: str
    type: str = "error"


UNKNOWN_MESSAGE = Message(message="Unknown message", type="error")


class MessageCatalog:
    """Messages for one language, falling back to English.

    Catalogs are read once at construction and never mutated.
    """

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        locales_dir: Path = LOCALES_DIR,
    ) -> None:
        """Initialize the catalog.

        Args:
            language: Language code such as ``en`` or ``pt-br``.
            locales_dir: Directory holding ``<language>.yaml`` files.
        """
        requested = language.strip().lower()
        path = locales_dir / f"{requested}.yaml"
        if not path.is_file():
            logger.warning(
                "language_fallback",
                component="i18n",
                requested=requested,
                fallback=DEFAULT_LANGUAGE,
            )
            requested = DEFAULT_LANGUAGE
            path = locales_dir / f"{DEFAULT_LANGUAGE}.yaml"

        self._language = requested
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        self._messages = {
            key: Message.model_validate(value)
            for key, value in (raw.get("messages") or {}).items()
        }

    @property
    def language(self) -> str:
        """Language actually in use."""
        return self._language

    def get_message(self, key: str) -> Message:
        """Look up a message by key.

        Args:
            key: Message key (an error kind name).

        Returns:
            The localized message, or a generic placeholder for unknown keys.
        """
        return self._messages.get(key, UNKNOWN_MESSAGE)
