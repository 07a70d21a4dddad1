"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

The storage key and storage directory are ordinary settings so that callers
(CLI, API, tests) can thread their own values through instead of relying on a
module-wide constant.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from blockfolio.core.contracts.output import DocumentInfo

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `BLOCKFOLIO_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    storage_dir : Path
        Directory used by the file-backed document store.
    storage_key : str
        Key under which the whole document is persisted.
    export_basename : str
        Prefix of exported file names (`<basename>-<ISO date>.pdf`).
    document_title, author, subject, keywords : str
        Metadata written into exported documents.
    autosave_delay : float
        Debounce window (seconds) used to coalesce rapid saves.
    """

    environment: EnvName = Field(default="dev", alias="BLOCKFOLIO_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    storage_dir: Path = Field(default=Path(".blockfolio"), alias="BLOCKFOLIO_STORAGE_DIR")
    storage_key: str = Field(default="blocknote-portfolio-content", alias="BLOCKFOLIO_STORAGE_KEY")

    export_basename: str = Field(default="blockfolio-document", alias="BLOCKFOLIO_EXPORT_BASENAME")
    document_title: str = Field(default="BlockNote Document", alias="BLOCKFOLIO_DOCUMENT_TITLE")
    author: str = Field(default="BlockNote Portfolio", alias="BLOCKFOLIO_AUTHOR")
    subject: str = Field(default="Exported from BlockNote Editor", alias="BLOCKFOLIO_SUBJECT")
    keywords: str = Field(default="blocknote, portfolio, export", alias="BLOCKFOLIO_KEYWORDS")

    autosave_delay: float = Field(default=0.5, ge=0.0, alias="BLOCKFOLIO_AUTOSAVE_DELAY")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)

    def document_info(self, title: str | None = None) -> DocumentInfo:
        """Build the export metadata, optionally overriding the title."""
        return DocumentInfo(
            title=title or self.document_title,
            author=self.author,
            subject=self.subject,
            keywords=self.keywords,
        )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("BLOCKFOLIO_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "blockfolio") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
