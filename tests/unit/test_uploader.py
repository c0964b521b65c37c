"""
Unit tests for the FileUploader.

Runs the full copy/commit flow against the in-memory store, with fault
injection at each storage stage.
"""

import io

import pytest

from upload_proxy.core.upload import (
    DependencyInitFailure,
    FileUploader,
    IncomingFile,
    IOFailure,
    UploadConfig,
)
from upload_proxy.core.upload.uploader import copy_stream

TEST_BUCKET = "test-bucket"


def make_file(data: bytes, filename: str = "photo.jpg", content_type: str = "image/jpeg") -> IncomingFile:
    return IncomingFile(filename=filename, stream=io.BytesIO(data), content_type=content_type)


class TestSuccessfulUpload:
    """Tests for uploads that reach storage."""

    @pytest.mark.asyncio
    async def test_stores_exact_bytes(self, uploader, storage):
        """Bytes larger than one copy chunk arrive intact."""
        data = bytes(range(256)) * 5000  # larger than one copy chunk

        stored = await uploader.upload(make_file(data))

        assert stored.size_bytes == len(data)
        assert storage.get_object(TEST_BUCKET, stored.object_name) == data

    @pytest.mark.asyncio
    async def test_object_name_and_url(self, uploader, clock):
        """Name and URL follow the date path layout."""
        stored = await uploader.upload(make_file(b"hello"))

        expected_name = f"2024/03/05/{int(clock.now * 1000)}-photo.jpg"
        assert stored.object_name == expected_name
        assert stored.url == f"https://storage.googleapis.com/{TEST_BUCKET}/{expected_name}"

    @pytest.mark.asyncio
    async def test_reads_from_start_of_stream(self, uploader, storage):
        """A stream left at EOF by the parser is rewound before copying."""
        incoming = make_file(b"abcdef")
        incoming.stream.read()

        stored = await uploader.upload(incoming)

        assert storage.get_object(TEST_BUCKET, stored.object_name) == b"abcdef"

    @pytest.mark.asyncio
    async def test_empty_file_creates_empty_object(self, uploader, storage):
        """A zero-byte file still commits an object."""
        stored = await uploader.upload(make_file(b""))

        assert stored.size_bytes == 0
        assert storage.get_object(TEST_BUCKET, stored.object_name) == b""

    @pytest.mark.asyncio
    async def test_forwards_content_type(self, uploader, storage):
        """The part content type is passed to the store."""
        stored = await uploader.upload(make_file(b"%PDF", "a.pdf", "application/pdf"))

        assert storage.content_types[(TEST_BUCKET, stored.object_name)] == "application/pdf"

    @pytest.mark.asyncio
    async def test_sanitizes_when_enabled(self, storage, clock):
        """Path components and spaces are stripped when enabled."""
        uploader = FileUploader(
            storage_factory=lambda: storage,
            config=UploadConfig(bucket_name=TEST_BUCKET, sanitize_filenames=True),
            clock=clock,
        )

        stored = await uploader.upload(make_file(b"x", "../secret plan.txt"))

        assert stored.object_name.endswith("-secret_plan.txt")

    @pytest.mark.asyncio
    async def test_custom_public_url_base(self, storage, clock):
        """URLs use the configured base."""
        uploader = FileUploader(
            storage_factory=lambda: storage,
            config=UploadConfig(bucket_name=TEST_BUCKET, public_url_base="https://cdn.example.com"),
            clock=clock,
        )

        stored = await uploader.upload(make_file(b"x"))

        assert stored.url.startswith(f"https://cdn.example.com/{TEST_BUCKET}/2024/03/05/")


class TestConcurrentNaming:
    """Same-millisecond uploads are only distinct when filenames differ."""

    @pytest.mark.asyncio
    async def test_different_filenames_are_distinct(self, uploader, storage):
        """Different names in the same millisecond don't collide."""
        first = await uploader.upload(make_file(b"1", "a.jpg"))
        second = await uploader.upload(make_file(b"2", "b.jpg"))

        assert first.object_name != second.object_name
        assert len(storage.objects) == 2

    @pytest.mark.asyncio
    async def test_same_filename_overwrites(self, uploader, storage):
        """Same name in the same millisecond keeps the last write."""
        first = await uploader.upload(make_file(b"first", "a.jpg"))
        second = await uploader.upload(make_file(b"second", "a.jpg"))

        assert first.object_name == second.object_name
        assert storage.get_object(TEST_BUCKET, second.object_name) == b"second"

    @pytest.mark.asyncio
    async def test_later_uploads_get_larger_prefixes(self, uploader, clock):
        """Names sort by upload time."""
        first = await uploader.upload(make_file(b"1", "a.jpg"))
        clock.advance(0.01)
        second = await uploader.upload(make_file(b"2", "a.jpg"))

        assert first.object_name < second.object_name


class TestUploadFailures:
    """Tests for mapping storage faults to upload errors."""

    @pytest.mark.asyncio
    async def test_commit_failure_is_io_failure(self, uploader, storage):
        """A failed commit is a 500 and leaves nothing stored."""
        storage.fail_on_commit = True

        with pytest.raises(IOFailure, match="simulated commit fault") as exc_info:
            await uploader.upload(make_file(b"data"))

        assert exc_info.value.status_code == 500
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_write_failure_is_io_failure(self, uploader, storage):
        """A failed write is an IOFailure."""
        storage.fail_on_write = True

        with pytest.raises(IOFailure, match="simulated write fault"):
            await uploader.upload(make_file(b"data"))

    @pytest.mark.asyncio
    async def test_open_failure_is_io_failure(self, uploader, storage):
        """A failed open is an IOFailure."""
        storage.fail_on_open = True

        with pytest.raises(IOFailure, match="simulated open fault"):
            await uploader.upload(make_file(b"data"))

    @pytest.mark.asyncio
    async def test_closed_source_is_io_failure(self, uploader, storage):
        """An unreadable source fails before any writer opens."""
        incoming = make_file(b"data")
        incoming.stream.close()

        with pytest.raises(IOFailure):
            await uploader.upload(incoming)

        assert storage.writers_opened == 0

    @pytest.mark.asyncio
    async def test_storage_factory_failure(self, upload_config, clock):
        """A store that can't be built is a DependencyInitFailure."""
        def broken_factory():
            raise RuntimeError("could not find default credentials")

        uploader = FileUploader(storage_factory=broken_factory, config=upload_config, clock=clock)

        with pytest.raises(DependencyInitFailure, match="default credentials"):
            await uploader.upload(make_file(b"data"))

    @pytest.mark.asyncio
    async def test_missing_bucket(self, storage, clock):
        """No bucket fails before any storage call."""
        uploader = FileUploader(
            storage_factory=lambda: storage,
            config=UploadConfig(bucket_name=""),
            clock=clock,
        )

        with pytest.raises(DependencyInitFailure, match="bucket"):
            await uploader.upload(make_file(b"data"))

        assert storage.writers_opened == 0


class TestCopyStream:
    """Tests for the chunked copy loop."""

    def test_copies_in_chunks(self):
        """Reads are split at the chunk size."""
        written = []

        class Recorder:
            def write(self, data):
                written.append(data)
                return len(data)

            def close(self):
                pass

        total = copy_stream(io.BytesIO(b"abcdefghij"), Recorder(), chunk_size=4)

        assert total == 10
        assert written == [b"abcd", b"efgh", b"ij"]
