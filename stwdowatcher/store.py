"""JSON-file persistence for retrieval validators and the seen-offer set."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import Settings
from .models import RetrievalMeta, SeenSet

logger = logging.getLogger(__name__)


class SeenStateCorrupted(RuntimeError):
    """The seen-offer file exists but cannot be read or decoded."""


@dataclass
class JsonStateStore:
    """Persist the seen-offer set and retrieval meta as two JSON files."""

    seen_path: Path
    meta_path: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "JsonStateStore":
        return cls(seen_path=settings.seen_path, meta_path=settings.meta_path)

    def load_meta(self) -> RetrievalMeta:
        """Return stored validators, or empty meta when absent or malformed."""
        if not self.meta_path.exists():
            return RetrievalMeta()
        try:
            payload = json.loads(self.meta_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable meta file %s: %s",
                           self.meta_path, exc)
            return RetrievalMeta()
        if not isinstance(payload, dict):
            logger.warning("Ignoring meta file %s with unexpected shape",
                           self.meta_path)
            return RetrievalMeta()
        return RetrievalMeta(
            etag=_optional_str(payload.get("etag")),
            last_modified=_optional_str(payload.get("lastModified")),
        )

    def save_meta(self, meta: RetrievalMeta) -> None:
        _write_json_atomic(self.meta_path, meta.to_dict())

    def load_seen(self) -> SeenSet:
        """Return the seen set.

        A missing or blank file is a legitimately empty set, and so is a
        decodable payload whose ``offers`` field is not a list of strings. A
        file that exists but cannot be read or decoded raises
        ``SeenStateCorrupted`` so the cycle aborts instead of re-reporting
        every known offer.
        """
        if not self.seen_path.exists():
            logger.info("No seen-offer file at %s; starting empty",
                        self.seen_path)
            return SeenSet()
        try:
            raw = self.seen_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise SeenStateCorrupted(
                f"Cannot read seen-offer file {self.seen_path}: {exc}"
            ) from exc
        if not raw.strip():
            logger.info("Seen-offer file %s is empty; starting empty",
                        self.seen_path)
            return SeenSet()
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise SeenStateCorrupted(
                f"Cannot parse seen-offer file {self.seen_path}: {exc}"
            ) from exc

        offers = payload.get("offers") if isinstance(payload, dict) else None
        if not isinstance(offers, list) or not all(
                isinstance(item, str) for item in offers):
            logger.warning(
                "Seen-offer file %s has unexpected shape; treating as empty",
                self.seen_path,
            )
            return SeenSet()
        return SeenSet(offers)

    def save_seen(self, seen: SeenSet) -> None:
        _write_json_atomic(self.seen_path, {"offers": seen.to_list()})


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _target_mode(path: Path) -> int:
    """Keep the permissions of an existing file; new files get 0644."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o644


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` to a temporary sibling file, then move it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(suffix=".json",
                                     prefix=f".{path.stem}-",
                                     dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
        os.chmod(temp_path, _target_mode(path))
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.debug("Wrote %s", path)


__all__ = ["JsonStateStore", "SeenStateCorrupted"]
