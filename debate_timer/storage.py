from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

Scalar = Union[int, str]


class StateBundle:
    """Flat key/value store for timer state, keyed by dotted prefixes."""

    def __init__(self, values: Optional[Dict[str, Scalar]] = None):
        self._values: Dict[str, Scalar] = dict(values or {})

    def put_int(self, key: str, value: int) -> None:
        self._values[key] = int(value)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._values.get(key)
        # bool is an int subclass but never a valid stored integer here
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    def put_str(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key)
        if isinstance(value, str):
            return value
        return default

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def to_dict(self) -> Dict[str, Scalar]:
        return dict(self._values)

    @classmethod
    def from_dict(cls, data: dict) -> "StateBundle":
        values: Dict[str, Scalar] = {}
        for key, value in data.items():
            if isinstance(value, (int, str)) and not isinstance(value, bool):
                values[str(key)] = value
            else:
                logger.warning("Skipping state item %s with unsupported value %r", key, value)
        return cls(values)


def load_state(path: Path) -> StateBundle:
    if not path.exists():
        return StateBundle()
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load timer state from %s: %s", path, exc)
        return StateBundle()
    if not isinstance(payload, dict):
        logger.error("Timer state in %s is not a JSON object; ignoring it", path)
        return StateBundle()
    return StateBundle.from_dict(payload)


def save_state(path: Path, bundle: StateBundle) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(bundle.to_dict(), f, ensure_ascii=False, indent=2)
