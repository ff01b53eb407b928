"""Split a local file into exact, contiguous byte ranges for chunked upload."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Upload session chunks must be a multiple of 320 KiB.
UPLOAD_CHUNK_ALIGNMENT = 320 * 1024


@dataclass(frozen=True)
class ChunkDescriptor:
    """One byte range of a source file.

    Attributes:
        source_file: Path of the file the range is read from.
        index: Zero-based position of the chunk in upload order.
        start: Offset of the first byte.
        end: Offset of the last byte (inclusive).
        total_size: Size of the whole file.
        chunk_size: Configured chunk size; only the last chunk may be shorter.
    """

    source_file: str
    index: int
    start: int
    end: int
    total_size: int
    chunk_size: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        """Value of the Content-Range header for this chunk."""
        return f"bytes {self.start}-{self.end}/{self.total_size}"

    def read(self) -> bytes:
        """Read exactly the bytes of this range from the source file.

        Raises:
            ValueError: If the file no longer holds the full range.
        """
        with open(self.source_file, "rb") as fh:
            fh.seek(self.start)
            data = fh.read(self.length)
        if len(data) != self.length:
            raise ValueError(
                f"Short read for chunk {self.index} of {self.source_file}: "
                f"expected {self.length} bytes, got {len(data)}"
            )
        return data


def validate_chunk_size(chunk_size: int, alignment: int = UPLOAD_CHUNK_ALIGNMENT) -> None:
    """Reject chunk sizes an upload session would not accept.

    Raises:
        ValueError: If *chunk_size* is not a positive multiple of *alignment*.
    """
    if chunk_size <= 0 or chunk_size % alignment != 0:
        raise ValueError(
            f"Chunk size must be a positive multiple of {alignment} bytes, got {chunk_size}"
        )


def plan_chunks(source_file: str, total_size: int, chunk_size: int) -> list[ChunkDescriptor]:
    """Partition ``total_size`` bytes into ascending, non-overlapping ranges.

    Produces ``ceil(total_size / chunk_size)`` descriptors; every one but the
    last covers exactly ``chunk_size`` bytes and the last ends at
    ``total_size - 1``. An empty file yields no descriptors.

    Raises:
        ValueError: If *chunk_size* is not positive or *total_size* is negative.
    """
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    if total_size < 0:
        raise ValueError(f"Total size must not be negative, got {total_size}")

    chunk_count = -(-total_size // chunk_size)
    return [
        ChunkDescriptor(
            source_file=source_file,
            index=i,
            start=i * chunk_size,
            end=min((i + 1) * chunk_size, total_size) - 1,
            total_size=total_size,
            chunk_size=chunk_size,
        )
        for i in range(chunk_count)
    ]


def split(source_path: str | Path, chunk_size: int) -> list[ChunkDescriptor]:
    """Describe the chunks of a local file.

    Content is not materialized; each descriptor reads its own range on demand.
    """
    path = os.fspath(source_path)
    return plan_chunks(path, os.path.getsize(path), chunk_size)
