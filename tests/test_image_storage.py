"""Storage of uploaded image files on the local filesystem."""

import io
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.services.image_storage import (
    CHUNK_SIZE,
    MAX_FILENAME_BYTES,
    ImageStorage,
    InvalidImageFileError,
    clean_filename,
    fit_filename,
    is_image_content_type,
)


def make_upload(data: bytes, filename: str = "photo.jpg", content_type: str = "image/jpeg") -> UploadFile:
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(file=io.BytesIO(data), filename=filename, size=len(data), headers=headers)


@pytest.mark.parametrize("content_type, expected", [
    ("image/png", True),
    ("image/svg+xml", True),
    ("text/plain", False),
    ("application/octet-stream", False),
    ("", False),
    (None, False),
])
def test_is_image_content_type(content_type, expected):
    assert is_image_content_type(content_type) is expected


@pytest.mark.parametrize("raw, cleaned", [
    ("photo.jpg", "photo.jpg"),
    ("../../photo.jpg", "photo.jpg"),
    ("/var/tmp/photo.jpg", "photo.jpg"),
    ("C:\\Users\\me\\photo.jpg", "photo.jpg"),
    ("dir/./photo.jpg", "photo.jpg"),
])
def test_clean_filename(raw, cleaned):
    assert clean_filename(raw) == cleaned


@pytest.mark.parametrize("raw", ["", "..", "uploads/..", "/"])
def test_clean_filename_rejects_empty_names(raw):
    with pytest.raises(InvalidImageFileError):
        clean_filename(raw)


async def test_store_creates_directory_and_writes_bytes(tmp_path: Path):
    upload_dir = tmp_path / "nested" / "uploads"
    storage = ImageStorage(upload_dir)
    data = b"jpeg-bytes" * 10_000

    filename = await storage.store(make_upload(data))

    assert filename.endswith("_photo.jpg")
    assert (upload_dir / filename).read_bytes() == data


async def test_store_generates_unique_names(tmp_path: Path):
    storage = ImageStorage(tmp_path)

    first = await storage.store(make_upload(b"one"))
    second = await storage.store(make_upload(b"two"))

    assert first != second
    assert (tmp_path / first).read_bytes() == b"one"
    assert (tmp_path / second).read_bytes() == b"two"


async def test_store_rereads_from_start(tmp_path: Path):
    storage = ImageStorage(tmp_path)
    upload = make_upload(b"full content")
    await upload.read(4)

    filename = await storage.store(upload)

    assert (tmp_path / filename).read_bytes() == b"full content"


async def test_store_rejects_non_image(tmp_path: Path):
    storage = ImageStorage(tmp_path / "uploads")

    with pytest.raises(InvalidImageFileError, match="Invalid image format"):
        await storage.store(make_upload(b"text", filename="a.txt", content_type="text/plain"))

    assert not (tmp_path / "uploads").exists()


async def test_store_rejects_missing_filename(tmp_path: Path):
    storage = ImageStorage(tmp_path)

    with pytest.raises(OSError):
        await storage.store(make_upload(b"data", filename=""))


async def test_delete(tmp_path: Path):
    storage = ImageStorage(tmp_path)
    filename = await storage.store(make_upload(b"data"))

    assert await storage.delete(filename) is True
    assert not (tmp_path / filename).exists()
    assert await storage.delete(filename) is False


def test_fit_filename_keeps_short_names():
    assert fit_filename("abc_", "photo.jpg") == "abc_photo.jpg"


def test_fit_filename_shortens_stem_and_keeps_extension():
    prefix = "0" * 36 + "_"

    fitted = fit_filename(prefix, "x" * 240 + ".png")

    assert len(fitted.encode("utf-8")) == MAX_FILENAME_BYTES
    assert fitted.startswith(prefix)
    assert fitted.endswith("x.png")


def test_fit_filename_does_not_split_multibyte_characters():
    fitted = fit_filename("p_", "ж" * 200 + ".jpg")

    assert len(fitted.encode("utf-8")) <= MAX_FILENAME_BYTES
    assert fitted.endswith(".jpg")
    assert fitted[2:-4] == "ж" * len(fitted[2:-4])


def test_fit_filename_rejects_oversized_extension():
    with pytest.raises(InvalidImageFileError):
        fit_filename("p_", "a." + "b" * 300)


async def test_store_long_filename(tmp_path: Path):
    storage = ImageStorage(tmp_path)

    filename = await storage.store(make_upload(b"data", filename="x" * 240 + ".png"))

    assert len(filename.encode("utf-8")) <= MAX_FILENAME_BYTES
    assert filename.endswith(".png")
    assert (tmp_path / filename).read_bytes() == b"data"


class FailingStream(io.BytesIO):
    """Returns one chunk and then fails, like a dropped client connection"""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise ConnectionResetError("client went away")
        return super().read(size)


async def test_store_removes_partial_file_on_write_failure(tmp_path: Path):
    storage = ImageStorage(tmp_path)
    upload = UploadFile(
        file=FailingStream(b"\xff" * (CHUNK_SIZE * 3)),
        filename="photo.jpg",
        headers=Headers({"content-type": "image/jpeg"}),
    )

    with pytest.raises(ConnectionResetError):
        await storage.store(upload)

    assert list(tmp_path.iterdir()) == []
