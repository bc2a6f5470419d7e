"""
Snapshot serialization for cached payloads.
"""

import json
from typing import Any

from pydantic_core import to_jsonable_python

# Placeholder for values with no JSON form; pruned before storage.
_UNSERIALIZABLE = "\x00__unserializable__\x00"


def _fallback(value: Any) -> str:
    return _UNSERIALIZABLE


def _prune(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if v != _UNSERIALIZABLE}
    if isinstance(value, list):
        return [_prune(v) for v in value if v != _UNSERIALIZABLE]
    return value


def snapshot(value: Any) -> Any:
    """
    Convert ``value`` to plain JSON-compatible data.

    Pydantic models, dataclasses, datetimes and containers are converted;
    anything else (connections, locks, open files) is dropped so the cached
    form never holds a live reference.
    """
    return _prune(to_jsonable_python(value, fallback=_fallback))


def dumps(value: Any) -> str:
    return json.dumps(snapshot(value), separators=(",", ":"))


def loads(payload: str) -> Any:
    return json.loads(payload)
