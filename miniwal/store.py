"""Durable append-only journal of JSON records, one record per line."""

from __future__ import annotations

import json
import os
from os import PathLike
from pathlib import Path
from typing import IO, Any, Callable, Generic, Iterator, List, Optional, TypeVar, Union

from .errors import (
    DeserializeError,
    MissingInitialStateError,
    SerializeError,
    StoreIOError,
)

JOURNAL_MAGIC = "// MINISTORE JOURNAL v0.1.3\n"
JOURNAL_MAGIC_PREFIX = "// MINISTORE JOURNAL v"

T = TypeVar("T")
PathArg = Union[str, "PathLike[str]"]
Decoder = Callable[[Any], T]


def _identity(value: Any) -> Any:
    return value


def _strip_eol(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def _read_line(handle: IO[str]) -> Optional[str]:
    try:
        raw = handle.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise StoreIOError(exc) from exc
    return None if raw == "" else _strip_eol(raw)


def _check_header(handle: IO[str]) -> None:
    first = _read_line(handle)
    if first is None or not first.startswith(JOURNAL_MAGIC_PREFIX):
        raise MissingInitialStateError()


def _open_for_reading(path: PathArg) -> IO[str]:
    try:
        return open(path, "r", encoding="utf-8", newline="\n")
    except OSError as exc:
        raise StoreIOError(exc) from exc


class JournalStream(Generic[T]):
    """Iterator over the records of a journal, decoded one line at a time.

    A line that cannot be decoded raises :class:`DeserializeError`; iteration
    may continue with the following line afterwards.
    """

    def __init__(self, handle: IO[str], decode: Decoder) -> None:
        self._handle = handle
        self._decode = decode
        self.line_number = 2

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        line = _read_line(self._handle)
        if line is None:
            raise StopIteration
        number = self.line_number
        self.line_number += 1
        try:
            return self._decode(json.loads(line))
        except (ValueError, TypeError, LookupError) as exc:
            raise DeserializeError(number, exc) from exc

    def close(self) -> None:
        """Close the underlying file."""
        self._handle.close()

    def __enter__(self) -> "JournalStream[T]":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class MiniStore:
    """An open journal file that records are appended to durably.

    Every append is flushed and fsync-ed before it returns.
    """

    def __init__(self, path: Path, handle: IO[bytes]) -> None:
        self.path = path
        self._handle = handle

    @classmethod
    def open(cls, path: PathArg) -> "MiniStore":
        """Open or create the journal at ``path``, writing the header if empty."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(path, "ab")
        except OSError as exc:
            raise StoreIOError(exc) from exc
        try:
            if os.fstat(handle.fileno()).st_size == 0:
                handle.write(JOURNAL_MAGIC.encode("utf-8"))
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            handle.close()
            raise StoreIOError(exc) from exc
        return cls(path, handle)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def append(self, record: Any) -> None:
        """Write ``record`` as one JSON line and sync it to disk."""
        if self._handle.closed:
            raise ValueError("I/O operation on closed journal")
        try:
            line = json.dumps(
                record, ensure_ascii=False, allow_nan=False, separators=(",", ":")
            )
            data = (line + "\n").encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializeError(exc) from exc
        try:
            self._handle.write(data)
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as exc:
            raise StoreIOError(exc) from exc

    def close(self) -> None:
        """Close the journal file."""
        self._handle.close()

    def __enter__(self) -> "MiniStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @staticmethod
    def replay(path: PathArg, decode: Optional[Decoder] = None) -> List[Any]:
        """Read every record of the journal at ``path``.

        A missing or empty file yields an empty list.
        """
        path = Path(path)
        try:
            if not path.exists() or path.stat().st_size == 0:
                return []
        except OSError as exc:
            raise StoreIOError(exc) from exc
        with MiniStore.stream(path, decode) as records:
            return list(records)

    @staticmethod
    def stream(path: PathArg, decode: Optional[Decoder] = None) -> JournalStream:
        """Open the journal at ``path`` and return a lazy record iterator."""
        handle = _open_for_reading(path)
        try:
            _check_header(handle)
        except BaseException:
            handle.close()
            raise
        return JournalStream(handle, decode or _identity)