"""Atomic snapshots of a full state, stored as JSON next to a sequence number."""

from __future__ import annotations

import json
import os
import re
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union

from .errors import InvalidSequenceError, SnapIOError, SnapSerdeError

SNAPSHOT_FILE = "snapshot.json"
METADATA_FILE = "snapshot.seq"

_MAX_SEQ = 2**64 - 1
_SEQ_PATTERN = re.compile(r"\+?[0-9]+")

PathArg = Union[str, "PathLike[str]"]


def _write_synced(path: Path, data: bytes) -> None:
    try:
        with open(path, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        raise SnapIOError(path, exc) from exc


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SnapIOError(path, exc) from exc


def _parse_seq(text: str) -> int:
    text = text.strip()
    if not _SEQ_PATTERN.fullmatch(text):
        raise InvalidSequenceError()
    value = int(text)
    if value > _MAX_SEQ:
        raise InvalidSequenceError()
    return value


def _is_file(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


class SnapStore:
    """Snapshot storage in one directory.

    A snapshot is two files: ``snapshot.json`` with the pretty-printed state
    and ``snapshot.seq`` with the sequence number as plain text. Both are
    written to temporary files, synced and then renamed into place.
    """

    def __init__(self, directory: PathArg) -> None:
        self._dir = Path(directory)
        self._snapshot_path = self._dir / SNAPSHOT_FILE
        self._metadata_path = self._dir / METADATA_FILE

    def __repr__(self) -> str:
        return f"SnapStore({str(self._dir)!r})"

    @property
    def dir(self) -> Path:
        """The directory that holds the snapshot files."""
        return self._dir

    @property
    def snapshot_path(self) -> Path:
        """Path of the state file."""
        return self._snapshot_path

    @property
    def metadata_path(self) -> Path:
        """Path of the sequence-number file."""
        return self._metadata_path

    def create(self, state: Any, seq: int) -> None:
        """Atomically replace the snapshot with ``state`` at sequence ``seq``.

        The directory is created if it does not exist.
        """
        if isinstance(seq, bool) or not isinstance(seq, int):
            raise TypeError(f"sequence number must be an int, got {type(seq).__name__}")
        if not 0 <= seq <= _MAX_SEQ:
            raise ValueError(f"sequence number out of range: {seq}")

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SnapIOError(self._dir, exc) from exc

        try:
            state_json = json.dumps(state, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise SnapSerdeError(exc) from exc

        state_tmp = self._snapshot_path.with_name(SNAPSHOT_FILE + ".tmp")
        seq_tmp = self._metadata_path.with_name(METADATA_FILE + ".tmp")

        _write_synced(state_tmp, state_json.encode("utf-8"))
        _write_synced(seq_tmp, str(seq).encode("ascii"))

        try:
            os.replace(state_tmp, self._snapshot_path)
        except OSError as exc:
            raise SnapIOError(state_tmp, exc) from exc
        try:
            os.replace(seq_tmp, self._metadata_path)
        except OSError as exc:
            raise SnapIOError(seq_tmp, exc) from exc

    def restore(self, decode: Optional[Callable[[Any], Any]] = None) -> Tuple[Any, int]:
        """Return ``(state, seq)`` from the stored snapshot.

        ``decode`` turns the parsed JSON value into the state object; without
        it the parsed value itself is returned.
        """
        state_json = _read_text(self._snapshot_path)
        try:
            state = json.loads(state_json)
            if decode is not None:
                state = decode(state)
        except (ValueError, TypeError, LookupError) as exc:
            raise SnapSerdeError(exc) from exc

        seq = _parse_seq(_read_text(self._metadata_path))
        return state, seq

    def exists(self) -> bool:
        """True when both snapshot files are present."""
        return _is_file(self._snapshot_path) and _is_file(self._metadata_path)