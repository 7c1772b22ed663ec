from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import pydantic

from ..config import DEFAULT_APP_CONFIG
from ..errors import StorageUnavailable
from .defaults import empty_document
from .migrations import upgrade
from .models import Dataset

logger = logging.getLogger(__name__)


class Store(Protocol):
    def load(self) -> Dataset: ...

    def save(self, dataset: Dataset) -> None: ...


class _DocumentStore:
    """Shared bootstrap/migrate/validate logic around a raw JSON document.

    Subclasses only know how to read and write the serialized text.
    """

    def __init__(
        self,
        join_code: str = DEFAULT_APP_CONFIG.default_team_code,
        seed_example: bool = DEFAULT_APP_CONFIG.seed_example,
    ) -> None:
        self._join_code = join_code
        self._seed_example = seed_example

    def _read_text(self) -> str | None:
        raise NotImplementedError

    def _write_text(self, text: str) -> None:
        raise NotImplementedError

    def load(self) -> Dataset:
        text = self._read_text()
        if text is None:
            logger.info("No stored data found, initializing default team")
            doc: dict[str, Any] = empty_document(self._join_code)
            changed = True
        else:
            try:
                doc = json.loads(text)
            except json.JSONDecodeError as exc:
                logger.error("Stored data is not valid JSON", exc_info=True)
                raise StorageUnavailable("Stored data is corrupted") from exc
            if not isinstance(doc, dict):
                raise StorageUnavailable("Stored data is corrupted")
            changed = False

        changed = upgrade(doc, self._join_code, self._seed_example) or changed

        try:
            dataset = Dataset.model_validate(doc)
        except pydantic.ValidationError as exc:
            logger.error("Stored data does not match the expected schema", exc_info=True)
            raise StorageUnavailable("Stored data is corrupted") from exc

        if changed:
            self.save(dataset)
        return dataset

    def save(self, dataset: Dataset) -> None:
        payload = dataset.model_dump(mode="json", by_alias=True)
        self._write_text(json.dumps(payload, ensure_ascii=False, indent=2))


class JsonFileStore(_DocumentStore):
    """Whole-document JSON file. Writers racing on the same file: last write wins."""

    def __init__(self, path: Path, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_text(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Failed to read %s", self._path, exc_info=True)
            raise StorageUnavailable("Storage could not be read") from exc

    def _write_text(self, text: str) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            logger.error("Failed to write %s", self._path, exc_info=True)
            raise StorageUnavailable("Storage could not be written") from exc


class InMemoryStore(_DocumentStore):
    """Keeps the serialized document in memory. Used by tests."""

    def __init__(self, initial: dict[str, Any] | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._text: str | None = json.dumps(initial) if initial is not None else None

    def _read_text(self) -> str | None:
        return self._text

    def _write_text(self, text: str) -> None:
        self._text = text
