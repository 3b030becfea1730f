"""
File-backed key/value storage for the report history.

`LocalStorage` mirrors the browser ``localStorage`` API (string keys, string
values) on top of a single JSON file. Every write rewrites the file
synchronously; there is no locking between processes.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .config import settings
from .models import ResearchReport

logger = logging.getLogger(__name__)

_reports_adapter = TypeAdapter(List[ResearchReport])


class LocalStorage:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def load_reports(storage: LocalStorage, key: Optional[str] = None) -> List[ResearchReport]:
    """Return the persisted report list, or an empty list if there is none."""
    raw = storage.get_item(key or settings.storage_key)
    if not raw:
        return []
    try:
        return _reports_adapter.validate_json(raw)
    except ValidationError as exc:
        logger.warning("Discarding unreadable report history: %s", exc)
        return []


def save_reports(
    storage: LocalStorage, reports: List[ResearchReport], key: Optional[str] = None
) -> None:
    storage.set_item(key or settings.storage_key, _reports_adapter.dump_json(reports).decode("utf-8"))
