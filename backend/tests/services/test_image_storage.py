"""Image Storage Service - writes, naming, parent resolution, and batch rollback.

Tests cover:
    - N files with a question id -> N descriptors, all question-owned, all on disk
    - Answer-owned batches carry only answer_id
    - Both / neither parent and empty batches fail before any IO
    - A failing write removes the files the batch already wrote, partial ones included
    - Traversal filenames never escape <root>/uploads
    - Stored bytes round-trip unchanged; names are unique per file
"""

import builtins
import itertools
import uuid

import pytest

from doconnect.core.errors import (
    InvalidParentReferenceError, StorageWriteError, UploadValidationError,
)
import doconnect.infrastructure.upload_directory as upload_directory_module
from doconnect.infrastructure.upload_directory import LocalUploadDirectory
from doconnect.services.image_storage import ImageStorageService, UploadedFile


def _files(*names):
    return [UploadedFile(filename=n, content=f"bytes-of-{n}".encode()) for n in names]


def _counter_tokens():
    counter = itertools.count(1)
    return lambda: f"tok{next(counter)}"


class FailingDirectory(LocalUploadDirectory):
    """Raises OSError when writing any path that ends with fail_suffix."""

    def __init__(self, root, fail_suffix: str):
        super().__init__(root)
        self.fail_suffix = fail_suffix

    def write_file(self, relative: str, content: bytes) -> None:
        if relative.endswith(self.fail_suffix):
            raise OSError(28, "No space left on device")
        super().write_file(relative, content)


class DiskFullFile:
    """File handle that accepts a few bytes, then fails like a full disk."""

    def __init__(self, f):
        self._f = f

    def write(self, data):
        self._f.write(data[:3])
        self._f.flush()
        raise OSError(28, "No space left on device")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._f.close()


# ─── happy path ──────────────────────────────────────────────────

async def test_two_files_for_question(tmp_path):
    storage = ImageStorageService(LocalUploadDirectory(tmp_path), _counter_tokens())
    qid = uuid.uuid4()

    descriptors = await storage.save_files(_files("a.png", "b.JPG"), question_id=qid)

    assert [d.path for d in descriptors] == ["uploads/tok1.png", "uploads/tok2.jpg"]
    assert all(d.question_id == qid and d.answer_id is None for d in descriptors)
    assert (tmp_path / "uploads" / "tok1.png").read_bytes() == b"bytes-of-a.png"
    assert (tmp_path / "uploads" / "tok2.jpg").read_bytes() == b"bytes-of-b.JPG"


async def test_file_for_answer(storage):
    aid = uuid.uuid4()
    [descriptor] = await storage.save_files(_files("x.gif"), answer_id=aid)
    assert descriptor.answer_id == aid
    assert descriptor.question_id is None
    assert descriptor.path.startswith("uploads/")
    assert descriptor.path.endswith(".gif")


async def test_same_filename_twice_gets_distinct_paths(storage):
    descriptors = await storage.save_files(
        _files("same.png", "same.png"), question_id=uuid.uuid4(),
    )
    assert descriptors[0].path != descriptors[1].path


async def test_round_trip_bytes(storage):
    payload = bytes(range(256)) * 4
    [d] = await storage.save_files(
        [UploadedFile("blob.bin", payload)], question_id=uuid.uuid4(),
    )
    assert await storage.read_file(d.path) == payload


# ─── rejected before IO ──────────────────────────────────────────

async def test_both_parents_rejected_without_io(tmp_path, storage):
    with pytest.raises(InvalidParentReferenceError):
        await storage.save_files(
            _files("a.png"), question_id=uuid.uuid4(), answer_id=uuid.uuid4(),
        )
    assert not (tmp_path / "uploads").exists()


async def test_neither_parent_rejected_without_io(tmp_path, storage):
    with pytest.raises(InvalidParentReferenceError):
        await storage.save_files(_files("a.png"))
    assert not (tmp_path / "uploads").exists()


async def test_empty_batch_rejected_without_io(tmp_path, storage):
    with pytest.raises(UploadValidationError):
        await storage.save_files([], question_id=uuid.uuid4())
    assert not (tmp_path / "uploads").exists()


# ─── failure and safety ──────────────────────────────────────────

async def test_failed_write_removes_written_files(tmp_path):
    directory = FailingDirectory(tmp_path, fail_suffix=".gif")
    storage = ImageStorageService(directory, _counter_tokens())

    with pytest.raises(StorageWriteError) as exc:
        await storage.save_files(
            _files("a.png", "b.gif", "c.png"), question_id=uuid.uuid4(),
        )

    assert exc.value.http_status == 503
    assert list((tmp_path / "uploads").iterdir()) == []


@pytest.mark.parametrize("filename", [
    "../../escape.png", "..\\..\\escape.png", "/etc/passwd", "sub/dir/name.png",
])
async def test_traversal_names_stay_in_uploads(tmp_path, filename):
    storage = ImageStorageService(LocalUploadDirectory(tmp_path), _counter_tokens())

    [d] = await storage.save_files(_files(filename), question_id=uuid.uuid4())

    stored = storage.resolve(d.path)
    assert stored.parent == (tmp_path / "uploads").resolve()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["uploads"]


async def test_discard_removes_descriptor_files(tmp_path, storage):
    descriptors = await storage.save_files(
        _files("a.png", "b.png"), question_id=uuid.uuid4(),
    )
    assert await storage.discard(descriptors) == 2
    assert list((tmp_path / "uploads").iterdir()) == []


async def test_write_failing_midway_leaves_no_partial_file(tmp_path, monkeypatch):
    monkeypatch.setattr(
        upload_directory_module, "open",
        lambda path, mode: DiskFullFile(builtins.open(path, mode)),
        raising=False,
    )
    storage = ImageStorageService(LocalUploadDirectory(tmp_path), _counter_tokens())

    with pytest.raises(StorageWriteError):
        await storage.save_files(_files("a.png", "b.png"), question_id=uuid.uuid4())

    assert list((tmp_path / "uploads").iterdir()) == []
