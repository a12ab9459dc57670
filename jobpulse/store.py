"""Persistent configuration store and session credential context."""
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigStoreError

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "session-token"
LIMIT_KEY = "limit"
DEFAULT_LIMIT = 300


class ConfigStore:
    """Key/value settings persisted to a YAML file.

    A missing file behaves as an empty store. Writes are persisted
    immediately so values survive across sessions.
    """

    def __init__(self, path: str | Path, default_limit: int = DEFAULT_LIMIT):
        self.path = Path(path)
        self.default_limit = default_limit
        self._data: Optional[dict[str, Any]] = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigStoreError(str(self.path), str(e)) from e

        if not isinstance(data, dict):
            raise ConfigStoreError(str(self.path), "expected a mapping at top level")

        self._data = data
        return self._data

    def reload(self) -> None:
        """Drop the in-memory copy so the next read hits the file."""
        self._data = None

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value and write the store to disk."""
        data = self._load()
        data[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            raise ConfigStoreError(str(self.path), str(e)) from e

    def limit(self) -> int:
        """
        Get the applicant threshold.

        Returns:
            Stored limit, or the default when absent, non-numeric or not positive
        """
        value = self.get(LIMIT_KEY)
        if value is None or isinstance(value, bool):
            return self.default_limit
        try:
            limit = int(float(value))
        except (ValueError, TypeError, OverflowError):
            logger.warning("Ignoring non-numeric limit %r, using %d", value, self.default_limit)
            return self.default_limit
        return limit if limit > 0 else self.default_limit

    def session_token(self) -> Optional[str]:
        token = self.get(SESSION_TOKEN_KEY)
        return str(token) if token else None


class SessionContext:
    """Holder of the credential used to authenticate remote calls."""

    def __init__(self, token: Optional[str] = None):
        self._token = token or None

    @classmethod
    def from_store(cls, store: ConfigStore, fallback: Optional[str] = None) -> "SessionContext":
        """Build a context from the store, falling back to e.g. an env setting."""
        token = store.session_token() or fallback
        if token:
            logger.info("Retrieved session token from configuration")
        else:
            logger.info("No session token found in configuration")
        return cls(token)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def update(self, token: Optional[str]) -> None:
        """Replace the current credential."""
        self._token = token or None

    def __repr__(self) -> str:
        state = "authenticated" if self.is_authenticated else "anonymous"
        return f"<{self.__class__.__name__} {state}>"
