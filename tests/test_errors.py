import pytest

from miniwal.errors import (
    DeserializeError,
    InvalidSequenceError,
    MiniSnapError,
    MiniStateError,
    MiniStoreError,
    MissingInitialStateError,
    PathIsNotFileError,
    SerializeError,
    SnapIOError,
    SnapSerdeError,
    SnapshotError,
    SnapshotNotFoundError,
    SnapshotSeqTooHighError,
    StateIOError,
    StoreError,
    StoreIOError,
)


@pytest.mark.parametrize(
    "cls, message",
    [
        (MissingInitialStateError, "Invalid journal file: missing initial state marker"),
        (InvalidSequenceError, "Snapshot sequence file contains invalid number"),
        (
            SnapshotNotFoundError,
            "Snapshot not found (missing snapshot.json or snapshot.seq)",
        ),
        (SnapshotSeqTooHighError, "Snapshot sequence number too high"),
    ],
)
def test_fixed_messages(cls, message):
    assert str(cls()) == message


@pytest.mark.parametrize(
    "cls, prefix, base",
    [
        (StoreIOError, "IO error: ", MiniStoreError),
        (SerializeError, "Serialization error: ", MiniStoreError),
        (StateIOError, "IO error: ", MiniStateError),
        (StoreError, "Store error: ", MiniStateError),
        (SnapshotError, "Snapshot error: ", MiniStateError),
        (SnapSerdeError, "Failed to serialize state: ", MiniSnapError),
    ],
)
def test_wrapped_errors_keep_source(cls, prefix, base):
    inner = OSError("boom")
    with pytest.raises(base) as info:
        raise cls(inner)
    err = info.value
    assert err.source is inner
    assert err.__cause__ is inner
    assert str(err).startswith(prefix)
    assert str(err).endswith("boom")


def test_deserialize_error_keeps_line_and_source():
    inner = ValueError("bad")
    err = DeserializeError(7, inner)
    assert err.line == 7
    assert err.source is inner
    assert err.__cause__ is inner
    assert str(err) == "Deserialization error at line 7: bad"


def test_snap_io_error_names_path():
    inner = FileNotFoundError("missing")
    err = SnapIOError("/data/snapshot.json", inner)
    assert err.path == "/data/snapshot.json"
    assert err.source is inner
    assert "/data/snapshot.json" in str(err)
    assert str(err).startswith("I/O error on ")
    assert str(err).endswith("missing")


def test_path_is_not_file_error_keeps_path():
    err = PathIsNotFileError("/data/dir")
    assert err.path == "/data/dir"
    assert "/data/dir" in str(err)
    assert str(err).startswith("Path must be a file, got: ")


def test_store_error_wraps_store_failure():
    inner = MissingInitialStateError()
    with pytest.raises(MiniStateError) as info:
        raise StoreError(inner)
    assert info.value.source is inner
    assert "missing initial state marker" in str(info.value)


def test_families_are_disjoint():
    err = InvalidSequenceError()
    assert str(err) == "Snapshot sequence file contains invalid number"
    assert isinstance(err, MiniSnapError)
    assert not isinstance(err, MiniStoreError)
    assert not isinstance(err, MiniStateError)