"""
Key-Value Backends

JsonFileBackend keeps every key in one JSON object on local disk:

    {"inputs": "{\"partyASalary\": 36000.0, ...}", "contributions": "..."}

Each value is the record's own serialized text, so the file looks like a
dump of a browser's local storage. Writes go to a temp file that then
replaces the original, so a crash never leaves a half-written file.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from fairsplit.services.storage.interface import (
    CorruptRecordError,
    KeyValueBackend,
    StorageUnavailableError,
)


class InMemoryBackend(KeyValueBackend):
    """
    Dict-backed backend.

    Nothing survives the process. Used in tests and when the file backend
    cannot be set up.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileBackend(KeyValueBackend):
    """
    Single-file JSON backend.

    The file and its directory are created on the first write.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        if self._path.is_dir():
            raise StorageUnavailableError(
                f"Storage path is a directory: {self._path}"
            )

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole file. A missing file is an empty store."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise CorruptRecordError(
                f"Storage file is not valid UTF-8: {self._path}"
            ) from e
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to read {self._path}: {e}"
            ) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptRecordError(
                f"Storage file is not valid JSON: {self._path}"
            ) from e

        if not isinstance(data, dict):
            raise CorruptRecordError(
                f"Storage file does not hold a JSON object: {self._path}"
            )

        # Only text values are meaningful
        return {k: v for k, v in data.items() if isinstance(v, str)}

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_fixed(0.05),
        reraise=True,
    )
    def _write_all(self, data: dict[str, str]) -> None:
        """Atomically replace the file with `data`."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _read_for_update(self) -> dict[str, str]:
        # A corrupt file is overwritten rather than blocking every save
        try:
            return self._read_all()
        except CorruptRecordError:
            return {}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[key] = value
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to write {self._path}: {e}"
            ) from e

    def remove(self, key: str) -> None:
        data = self._read_for_update()
        if key not in data:
            return
        del data[key]
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to write {self._path}: {e}"
            ) from e
