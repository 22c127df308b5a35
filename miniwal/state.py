"""In-memory state kept durable by a write-ahead journal and optional snapshots."""

from __future__ import annotations

import copy
import dataclasses
import threading
from os import PathLike
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from .errors import (
    MiniSnapError,
    MiniStoreError,
    SerializeError,
    SnapshotError,
    SnapshotSeqTooHighError,
    StateIOError,
    StoreError,
)
from .mutator import _apply_one, apply_all
from .snapshot import SnapStore
from .store import MiniStore

PathArg = Union[str, "PathLike[str]"]
Encoder = Callable[[Any], Any]
Decoder = Callable[[Any], Any]


def _default_encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def _identity(value: Any) -> Any:
    return value


def _replay(journal_path: Path, decode_mutation: Decoder) -> List[Any]:
    try:
        return MiniStore.replay(journal_path, decode_mutation)
    except MiniStoreError as exc:
        raise StoreError(exc) from exc


def _open_store(journal_path: Path) -> MiniStore:
    try:
        return MiniStore.open(journal_path)
    except MiniStoreError as exc:
        raise StoreError(exc) from exc


class StateManager:
    """Keeps a state in memory and logs every mutation before applying it.

    A mutation is written to the journal and synced to disk first; only then
    is it applied to the in-memory state. On opening, the state is rebuilt by
    replaying the journal, optionally starting from a snapshot. Mutations are
    applied one at a time; the manager is safe to share between threads.
    """

    def __init__(
        self,
        state: Any,
        store: MiniStore,
        seq: int,
        state_dir: Path,
        journal_path: Path,
        encode_mutation: Encoder,
        encode_state: Encoder,
    ) -> None:
        self._state = state
        self._store = store
        self._seq = seq
        self._state_dir = state_dir
        self._journal_path = journal_path
        self._encode_mutation = encode_mutation
        self._encode_state = encode_state
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"StateManager(journal={str(self._journal_path)!r}, seq={self._seq})"
        )

    @classmethod
    def open(
        cls,
        state_dir: PathArg,
        journal_file: PathArg,
        state_factory: Callable[[], Any],
        decode_mutation: Decoder,
        encode_mutation: Optional[Encoder] = None,
        encode_state: Optional[Encoder] = None,
        decode_state: Optional[Decoder] = None,
        snapshot: bool = False,
    ) -> "StateManager":
        """Open the state stored at ``state_dir/journal_file``.

        Without ``snapshot`` the whole journal is replayed onto a fresh state
        from ``state_factory``. With ``snapshot`` the work is done by
        :meth:`open_with_snapshot`.
        """
        if snapshot:
            return cls.open_with_snapshot(
                state_dir,
                journal_file,
                state_factory,
                decode_mutation,
                encode_mutation,
                encode_state,
                decode_state,
            )

        state_dir = Path(state_dir)
        try:
            state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StateIOError(exc) from exc

        journal_path = state_dir / journal_file
        records = _replay(journal_path, decode_mutation)
        state = apply_all(state_factory(), records)
        store = _open_store(journal_path)
        return cls(
            state,
            store,
            len(records),
            state_dir,
            journal_path,
            encode_mutation or _default_encode,
            encode_state or _default_encode,
        )

    @classmethod
    def open_with_snapshot(
        cls,
        state_dir: PathArg,
        journal_file: PathArg,
        state_factory: Callable[[], Any],
        decode_mutation: Decoder,
        encode_mutation: Optional[Encoder] = None,
        encode_state: Optional[Encoder] = None,
        decode_state: Optional[Decoder] = None,
    ) -> "StateManager":
        """Open the state from the latest snapshot plus the journal tail.

        If no complete snapshot exists, the whole journal is replayed. A
        snapshot whose sequence number exceeds the journal length raises
        :class:`SnapshotSeqTooHighError`.
        """
        state_dir = Path(state_dir)
        journal_path = state_dir / journal_file

        snap_store = SnapStore(state_dir)
        state, seq = cls._load_snapshot(snap_store, state_factory, decode_state)

        records = _replay(journal_path, decode_mutation)
        if seq > len(records):
            raise SnapshotSeqTooHighError()

        tail = records[seq:]
        state = apply_all(state, tail)
        seq += len(tail)

        store = _open_store(journal_path)
        return cls(
            state,
            store,
            seq,
            state_dir,
            journal_path,
            encode_mutation or _default_encode,
            encode_state or _default_encode,
        )

    @staticmethod
    def _load_snapshot(
        snap_store: SnapStore,
        state_factory: Callable[[], Any],
        decode_state: Optional[Decoder],
    ) -> Tuple[Any, int]:
        if not snap_store.exists():
            return state_factory(), 0
        try:
            return snap_store.restore(decode_state or _identity)
        except MiniSnapError as exc:
            raise SnapshotError(exc) from exc

    def apply(self, mutation: Any) -> int:
        """Log ``mutation`` durably, apply it, and return its sequence number.

        If logging fails the state is left unchanged.
        """
        with self._lock:
            try:
                encoded = self._encode_mutation(mutation)
            except (TypeError, ValueError) as exc:
                raise StoreError(SerializeError(exc)) from exc
            try:
                self._store.append(encoded)
            except MiniStoreError as exc:
                raise StoreError(exc) from exc
            self._seq += 1
            self._state = _apply_one(self._state, mutation)
            return self._seq

    def snapshot(self) -> Any:
        """Return an independent copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    @property
    def sequence(self) -> int:
        """Number of mutations applied so far."""
        return self._seq

    @property
    def journal_path(self) -> Path:
        """Full path of the journal file."""
        return self._journal_path

    @property
    def state_dir(self) -> Path:
        """Directory holding the journal and snapshot files."""
        return self._state_dir

    def create_snapshot(self) -> None:
        """Write the current state and sequence number as a snapshot.

        The journal is left as it is.
        """
        with self._lock:
            state = copy.deepcopy(self._state)
            seq = self._seq
        try:
            encoded = self._encode_state(state)
        except (TypeError, ValueError) as exc:
            raise SnapshotError(exc) from exc
        try:
            SnapStore(self._state_dir).create(encoded, seq)
        except MiniSnapError as exc:
            raise SnapshotError(exc) from exc

    def close(self) -> None:
        """Close the journal."""
        with self._lock:
            self._store.close()

    def __enter__(self) -> "StateManager":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()