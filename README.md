# miniwal

A small library for keeping application state on disk safely:

- **`miniwal.store.MiniStore`**: an append-only write-ahead journal. Every
  record is written as one JSON line, flushed and `fsync`-ed before
  `append` returns.
- **`miniwal.snapshot.SnapStore`**: atomic snapshots of a whole state plus a
  sequence number. Both are written to temporary files, synced, and then
  renamed into place.
- **`miniwal.state.StateManager`**: an in-memory state that changes only
  through mutations. Each mutation is logged durably before it is applied,
  and the state is rebuilt on opening by replaying the journal, optionally
  starting from a snapshot.

The package uses only the standard library.

## Installation

```
pip install miniwal
```

## The journal

A journal is a JSON Lines text file whose first line is a magic header:

```text
// MINISTORE JOURNAL v0.1.3
{"Set":{"value":10}}
{"Inc":{"by":5}}
```

```python
from miniwal.store import MiniStore

with MiniStore.open("data/counter.wal.jsonl") as store:
    store.append({"Set": {"value": 100}})
    store.append({"Inc": {"by": 25}})

records = MiniStore.replay("data/counter.wal.jsonl", decode=dict)
```

- `MiniStore.open(path)` creates missing parent directories and writes the
  header into a new or empty file. An existing non-empty file is opened for
  appending as it is; its header is checked only when it is read.
- `append(record)` writes any JSON-serializable value. A value that cannot
  be serialized raises `SerializeError`; a failed write or sync raises
  `StoreIOError`. The open store has `path` and `closed` attributes and is a
  context manager; `close()` closes the file.
- `MiniStore.replay(path, decode=None)` returns every record as a list. A
  missing or empty file gives an empty list. `decode` is called on each
  parsed JSON value; without it the parsed value is returned unchanged.
- Reading raises `MissingInitialStateError` when the first line does not
  start with `// MINISTORE JOURNAL v`, and `DeserializeError` when a line is
  not valid JSON or `decode` rejects it (with `ValueError`, `TypeError`,
  `KeyError` or `IndexError`). The error's `line` attribute is the 1-based
  line number in the file, so the first record is line 2.

To read a long journal without loading all of it, use a stream:

```python
with MiniStore.stream("data/counter.wal.jsonl", decode=dict) as records:
    for record in records:
        print(record)
```

`MiniStore.stream` opens the file and checks the header at once, raising
`StoreIOError` if the file cannot be opened. The returned `JournalStream` is
an iterator and a context manager. A line that cannot be decoded raises
`DeserializeError` from `next()`; iteration can go on with the following
line afterwards. Its `line_number` attribute is the number of the next line
to be read.

## Snapshots

```python
from miniwal.snapshot import SnapStore

snaps = SnapStore("data/snapshots")
snaps.create({"counter": 42}, 10)

if snaps.exists():
    state, seq = snaps.restore(decode=dict)
```

A snapshot is two files in the directory: `snapshot.json` holds the state as
JSON indented by two spaces, and `snapshot.seq` holds the sequence number as
plain text. Their paths are available as `snapshot_path` and
`metadata_path`, and the directory as `dir`.

- `create(state, seq)` creates the directory if needed and replaces both
  files. `seq` must be an `int` from 0 to 2**64 - 1 (`TypeError` or
  `ValueError` otherwise). A state that cannot be serialized raises
  `SnapSerdeError`; a file operation that fails raises `SnapIOError`, which
  carries the `path` involved.
- `restore(decode=None)` returns `(state, seq)`. A missing or unreadable
  file raises `SnapIOError`; invalid JSON, or a `decode` that fails, raises
  `SnapSerdeError`; a sequence file that does not hold a non-negative 64-bit
  integer (surrounding whitespace is allowed) raises `InvalidSequenceError`.
- `exists()` is true only when both files are present.

## Managed state

```python
from dataclasses import dataclass

from miniwal.mutator import Mutator
from miniwal.state import StateManager


@dataclass
class Counter:
    value: int = 0


@dataclass
class Inc(Mutator):
    by: int

    def apply(self, state):
        state.value += self.by


with StateManager.open(
    "data",
    "counter.wal.jsonl",
    state_factory=Counter,
    decode_mutation=lambda raw: Inc(**raw),
    decode_state=lambda raw: Counter(**raw),
    snapshot=True,
) as mgr:
    seq = mgr.apply(Inc(by=10))   # 1 on a fresh directory
    print(mgr.snapshot().value)   # 10
    print(mgr.sequence)           # 1
    mgr.create_snapshot()
```

A `Mutator` subclass implements `apply(state)`. It may change the state in
place and return `None`, or return a new state object, which suits
immutable states. `miniwal.mutator.apply_all(state, mutations)` applies a
sequence of mutations in order and returns the final state.

`StateManager.open(state_dir, journal_file, state_factory, decode_mutation,
encode_mutation=None, encode_state=None, decode_state=None, snapshot=False)`:

- `state_factory` builds the empty starting state; `decode_mutation` turns a
  parsed journal record back into a mutation; `decode_state` turns a parsed
  snapshot back into a state (without it the parsed JSON value is used).
- `encode_mutation` and `encode_state` turn a mutation or a state into a
  JSON-serializable value. By default a dataclass instance is converted with
  `dataclasses.asdict` and any other value is used as it is.
- Without `snapshot`, the state directory is created if needed and the whole
  journal is replayed onto a fresh state. With `snapshot=True`, or by calling
  `StateManager.open_with_snapshot(...)` directly, a complete snapshot in the
  state directory is loaded first and only the journal records after its
  sequence number are replayed. A snapshot whose sequence number is beyond
  the end of the journal raises `SnapshotSeqTooHighError`.

On an open manager:

- `apply(mutation)` writes the encoded mutation to the journal first and
  changes the in-memory state only after that write succeeds. It returns the
  mutation's 1-based sequence number. Calls are serialized with a lock, so
  the manager can be shared between threads.
- `snapshot()` returns a deep copy of the current state.
- `sequence` is the number of mutations applied so far; `journal_path` and
  `state_dir` are the paths in use.
- `create_snapshot()` saves the current state and sequence number into the
  state directory. The journal is left as it is.
- `close()` closes the journal; the manager is also a context manager.

Mutations must be deterministic and free of side effects: on opening they
are replayed against the restored state, and a mutation that gives a
different result on a second run makes the state diverge.

## Errors

All errors are defined in `miniwal.errors`, in three families:

- `MiniStoreError`: `StoreIOError`, `SerializeError`, `DeserializeError`,
  `MissingInitialStateError`, `PathIsNotFileError`
- `MiniSnapError`: `SnapIOError`, `SnapSerdeError`, `InvalidSequenceError`,
  `SnapshotNotFoundError`
- `MiniStateError`: `StateIOError`, `StoreError`, `SnapshotError`,
  `SnapshotSeqTooHighError`

`StateManager` wraps journal errors in `StoreError` and snapshot errors in
`SnapshotError`; the original error is in the `source` attribute.
`PathIsNotFileError` and `SnapshotNotFoundError` are defined but not raised
by the package's own code.

## What it does not do

- The journal is never compacted or truncated, not even after a snapshot;
  it grows with every mutation.
- There is no command-line tool or server; this is a library only.

## Running the tests

```
pip install -e ".[test]"
pytest
```