"""Unit tests for graph/splitter.py — chunk planning and exact range reads."""

import os
from pathlib import Path

import pytest

from onedrive_transfer.graph.splitter import (
    UPLOAD_CHUNK_ALIGNMENT,
    ChunkDescriptor,
    plan_chunks,
    split,
    validate_chunk_size,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_file(tmp_path: Path, size: int, name: str = "source.bin") -> Path:
    path = tmp_path / name
    path.write_bytes(os.urandom(size))
    return path


# ---------------------------------------------------------------------------
# plan_chunks tests
# ---------------------------------------------------------------------------


class TestPlanChunks:
    def test_one_million_bytes_in_320_kib_chunks(self) -> None:
        chunks = plan_chunks("f.bin", 1_000_000, 327_680)
        assert [c.length for c in chunks] == [327680, 327680, 327680, 16960]
        assert [c.end for c in chunks] == [327679, 655359, 983039, 999999]
        assert [c.start for c in chunks] == [0, 327680, 655360, 983040]
        assert [c.index for c in chunks] == [0, 1, 2, 3]

    @pytest.mark.parametrize(
        ("total", "size"),
        [(1, 1), (1, 10), (10, 1), (10, 3), (99, 33), (100, 33), (327_680, 327_680), (5, 7)],
    )
    def test_chunk_count_and_lengths(self, total: int, size: int) -> None:
        chunks = plan_chunks("f.bin", total, size)
        assert len(chunks) == -(-total // size)
        assert sum(c.length for c in chunks) == total
        assert all(c.length == size for c in chunks[:-1])
        assert chunks[-1].end == total - 1
        assert chunks[0].start == 0
        for prev, cur in zip(chunks, chunks[1:]):
            assert cur.start == prev.end + 1

    def test_exact_multiple_has_no_short_chunk(self) -> None:
        chunks = plan_chunks("f.bin", 30, 10)
        assert [c.length for c in chunks] == [10, 10, 10]

    def test_empty_file_yields_no_chunks(self) -> None:
        assert plan_chunks("f.bin", 0, 10) == []

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_chunk_size(self, size: int) -> None:
        with pytest.raises(ValueError, match="positive"):
            plan_chunks("f.bin", 10, size)

    def test_rejects_negative_total(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            plan_chunks("f.bin", -1, 10)


class TestChunkDescriptor:
    def test_content_range_header(self) -> None:
        chunk = ChunkDescriptor("f.bin", 3, 983040, 999999, 1_000_000, 327_680)
        assert chunk.content_range == "bytes 983040-999999/1000000"
        assert chunk.length == 16960


# ---------------------------------------------------------------------------
# split / read tests
# ---------------------------------------------------------------------------


class TestSplit:
    def test_concatenated_chunks_reconstruct_file(self, tmp_path: Path) -> None:
        source = _write_file(tmp_path, 1_000_000)
        chunks = split(source, 327_680)

        assert len(chunks) == 4
        assert b"".join(c.read() for c in chunks) == source.read_bytes()

    @pytest.mark.parametrize(("total", "size"), [(1, 4), (17, 4), (4096, 1000), (64, 64)])
    def test_reads_are_exact_length(self, tmp_path: Path, total: int, size: int) -> None:
        source = _write_file(tmp_path, total)
        chunks = split(source, size)
        data = [c.read() for c in chunks]
        assert [len(d) for d in data] == [c.length for c in chunks]
        assert b"".join(data) == source.read_bytes()

    def test_last_chunk_is_not_padded(self, tmp_path: Path) -> None:
        source = tmp_path / "short.bin"
        source.write_bytes(b"abcdefghij")
        chunks = split(source, 4)
        assert chunks[-1].read() == b"ij"

    def test_descriptors_record_source_and_sizes(self, tmp_path: Path) -> None:
        source = _write_file(tmp_path, 10)
        chunk = split(str(source), 4)[0]
        assert chunk.source_file == str(source)
        assert chunk.total_size == 10
        assert chunk.chunk_size == 4

    def test_short_read_raises(self, tmp_path: Path) -> None:
        source = _write_file(tmp_path, 10)
        chunks = split(source, 4)
        source.write_bytes(b"abc")
        with pytest.raises(ValueError, match="Short read"):
            chunks[1].read()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            split(tmp_path / "nope.bin", 4)


# ---------------------------------------------------------------------------
# validate_chunk_size tests
# ---------------------------------------------------------------------------


class TestValidateChunkSize:
    @pytest.mark.parametrize("size", [UPLOAD_CHUNK_ALIGNMENT, 32 * UPLOAD_CHUNK_ALIGNMENT])
    def test_accepts_aligned_sizes(self, size: int) -> None:
        validate_chunk_size(size)

    @pytest.mark.parametrize("size", [0, -UPLOAD_CHUNK_ALIGNMENT, 1000, 4 * 1024 * 1024 + 1])
    def test_rejects_misaligned_sizes(self, size: int) -> None:
        with pytest.raises(ValueError, match="multiple of 327680"):
            validate_chunk_size(size)

    def test_custom_alignment(self) -> None:
        validate_chunk_size(12, alignment=4)
        with pytest.raises(ValueError):
            validate_chunk_size(10, alignment=4)
