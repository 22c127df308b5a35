"""Exception hierarchy for the journal, snapshot and state layers."""

from __future__ import annotations

from os import PathLike
from typing import Any, Union

PathArg = Union[str, "PathLike[str]"]


class _WrappedError(Exception):
    """An error that carries the underlying cause as ``source``."""

    _template = "{source}"

    def __init__(self, source: Any) -> None:
        super().__init__(self._template.format(source=source))
        self.source = source
        if isinstance(source, BaseException):
            self.__cause__ = source


class _FixedError(Exception):
    """An error with a fixed message and no payload."""

    _message = ""

    def __init__(self) -> None:
        super().__init__(self._message)


# --- journal store -----------------------------------------------------------


class MiniStoreError(Exception):
    """Base class for journal store errors."""


class StoreIOError(_WrappedError, MiniStoreError):
    """An I/O operation on the journal failed."""

    _template = "IO error: {source}"


class SerializeError(_WrappedError, MiniStoreError):
    """A record could not be serialized."""

    _template = "Serialization error: {source}"


class DeserializeError(MiniStoreError):
    """A journal line could not be turned back into a record."""

    def __init__(self, line: int, source: Any) -> None:
        super().__init__(f"Deserialization error at line {line}: {source}")
        self.line = line
        self.source = source
        if isinstance(source, BaseException):
            self.__cause__ = source


class MissingInitialStateError(_FixedError, MiniStoreError):
    """The journal does not start with the magic header."""

    _message = "Invalid journal file: missing initial state marker"


class PathIsNotFileError(MiniStoreError):
    """The journal path does not name a regular file."""

    def __init__(self, path: PathArg) -> None:
        super().__init__(f'Path must be a file, got: "{path}"')
        self.path = path


# --- snapshot store ----------------------------------------------------------


class MiniSnapError(Exception):
    """Base class for snapshot store errors."""


class SnapIOError(MiniSnapError):
    """An I/O operation on a snapshot file failed."""

    def __init__(self, path: PathArg, source: Any) -> None:
        super().__init__(f"I/O error on {path}: {source}")
        self.path = path
        self.source = source
        if isinstance(source, BaseException):
            self.__cause__ = source


class SnapSerdeError(_WrappedError, MiniSnapError):
    """Snapshot state could not be serialized or deserialized."""

    _template = "Failed to serialize state: {source}"


class InvalidSequenceError(_FixedError, MiniSnapError):
    """The snapshot sequence file does not hold a valid number."""

    _message = "Snapshot sequence file contains invalid number"


class SnapshotNotFoundError(_FixedError, MiniSnapError):
    """No complete snapshot exists."""

    _message = "Snapshot not found (missing snapshot.json or snapshot.seq)"


# --- state manager -----------------------------------------------------------


class MiniStateError(Exception):
    """Base class for state manager errors."""


class StateIOError(_WrappedError, MiniStateError):
    """An I/O operation of the state manager failed."""

    _template = "IO error: {source}"


class StoreError(_WrappedError, MiniStateError):
    """The underlying journal store reported an error."""

    _template = "Store error: {source}"


class SnapshotError(_WrappedError, MiniStateError):
    """The underlying snapshot store reported an error."""

    _template = "Snapshot error: {source}"


class SnapshotSeqTooHighError(_FixedError, MiniStateError):
    """The snapshot refers to more records than the journal holds."""

    _message = "Snapshot sequence number too high"