"""Persisted credential: the bearer token, a little user metadata and an optional server URL."""
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path.home() / ".sortr" / "credentials.json"


@dataclass
class StoredCredential:
    token: str | None = None
    user: dict[str, Any] = field(default_factory=dict)
    base_url: str | None = None


class TokenStore:
    def __init__(self, path: str | os.PathLike = DEFAULT_PATH):
        self.path = Path(path)
        self._state = self._read()

    def _read(self) -> StoredCredential:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return StoredCredential()
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, exc)
            return StoredCredential()
        return StoredCredential(
            token=raw.get("token"),
            user=raw.get("user") or {},
            base_url=raw.get("baseUrl"),
        )

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = asdict(self._state)
        data["baseUrl"] = data.pop("base_url")
        # owner read/write only, also when the file already existed
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.chmod(self.path, 0o600)

    @property
    def token(self) -> str | None:
        return self._state.token

    @property
    def user(self) -> dict[str, Any]:
        return dict(self._state.user)

    @property
    def base_url(self) -> str | None:
        return self._state.base_url

    def save(self, token: str, user: dict[str, Any] | None = None) -> None:
        self._state.token = token
        self._state.user = {k: v for k, v in (user or {}).items() if k in ("id", "username", "displayName", "isAdmin")}
        self._write()

    def set_base_url(self, base_url: str | None) -> None:
        self._state.base_url = base_url.rstrip("/") if base_url else None
        self._write()

    def clear(self) -> None:
        """Forget the credential but keep the server override."""
        self._state.token = None
        self._state.user = {}
        self._write()
