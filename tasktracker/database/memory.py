"""In-memory key-value store.

Drop-in replacement for KeyValueRepository when no database is wanted
(tests, throwaway sessions).
"""

from typing import Dict, Optional


class InMemoryKeyValueStore:
    """Dict-backed key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None
