"""Pipeline context for carrying stage outputs through a run."""

from typing import Any, Dict
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContextKey:
    """Type-safe context key identifier."""

    name: str

    def __str__(self) -> str:
        return self.name


USER_QUERY = ContextKey("user_query")
LANGUAGE = ContextKey("language")

# Metadata keys (not stage output)
CANCEL_TOKEN = "cancel_token"


@dataclass
class PipelineContext:
    """
    Immutable context that flows through pipeline stages.

    Each stage receives a context and produces a new context with its
    output added. Context is never mutated in place.
    """

    _data: Dict[str, Any] = field(default_factory=dict)
    _metadata: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: ContextKey, default: Any = None) -> Any:
        return self._data.get(str(key), default)

    def set(self, key: ContextKey, value: Any) -> "PipelineContext":
        """Return a new context with the key set."""
        new_data = self._data.copy()
        new_data[str(key)] = value
        return PipelineContext(_data=new_data, _metadata=self._metadata.copy())

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get metadata value (for internal pipeline use)."""
        return self._metadata.get(key, default)

    def set_metadata(self, key: str, value: Any) -> "PipelineContext":
        """Return a new context with metadata set."""
        new_metadata = self._metadata.copy()
        new_metadata[key] = value
        return PipelineContext(_data=self._data.copy(), _metadata=new_metadata)

    def has(self, key: ContextKey) -> bool:
        return str(key) in self._data

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def with_user_query(self, query: str) -> "PipelineContext":
        return self.set(USER_QUERY, query)

    def with_language(self, language: str) -> "PipelineContext":
        return self.set(LANGUAGE, language)

    def with_token(self, token: Any) -> "PipelineContext":
        return self.set_metadata(CANCEL_TOKEN, token)

    @property
    def token(self) -> Any:
        return self._metadata.get(CANCEL_TOKEN)
