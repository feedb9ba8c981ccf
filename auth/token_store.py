from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from apiclient.constants import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from auth.models import Credentials


class TokenStore(ABC):
    """Async key/value access to the stored credentials.

    Reading a missing key returns ``None`` and deleting one is a no-op.
    """

    @abstractmethod
    async def read(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def write(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def save_credentials(self, credentials: Credentials) -> None:
        await self.write(ACCESS_TOKEN_KEY, credentials.access_token)
        await self.write(REFRESH_TOKEN_KEY, credentials.refresh_token)

    async def clear(self) -> None:
        await self.delete(ACCESS_TOKEN_KEY)
        await self.delete(REFRESH_TOKEN_KEY)


class MemoryTokenStore(TokenStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._tokens: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self._tokens.get(key)

    async def write(self, key: str, value: str) -> None:
        self._tokens[key] = value

    async def delete(self, key: str) -> None:
        self._tokens.pop(key, None)


class FileTokenStore(TokenStore):
    def __init__(self, path: str | Path = ".tokens.json") -> None:
        self._path = Path(path)

    async def read(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if not isinstance(value, str):
            return None
        return value

    async def write(self, key: str, value: str) -> None:
        all_tokens = self._read_all()
        all_tokens[key] = value
        self._write_all(all_tokens)

    async def delete(self, key: str) -> None:
        all_tokens = self._read_all()
        if key not in all_tokens:
            return
        del all_tokens[key]
        self._write_all(all_tokens)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Token store file is invalid; expected top-level JSON object.")
        return raw

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
