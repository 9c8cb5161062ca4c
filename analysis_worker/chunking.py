"""Byte-range planning for videos larger than the provider's inline payload limit."""
import math
from dataclasses import dataclass
from typing import List

from shared.config import CHUNK_OVERLAP, MAX_CHUNK_SIZE
from shared.errors import ChunkConfigurationError


@dataclass(frozen=True)
class ChunkRange:
    """Half-open byte range ``[start, end)`` of a video."""
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


class ChunkPlanner:
    """Splits a payload into overlapping ranges no larger than ``max_chunk_size``.

    Consecutive ranges start ``max_chunk_size - overlap_size`` bytes apart, so
    each range repeats the last ``overlap_size`` bytes of the one before it.
    """

    def __init__(self, max_chunk_size: int = MAX_CHUNK_SIZE, overlap_size: int = CHUNK_OVERLAP):
        if max_chunk_size <= 0:
            raise ChunkConfigurationError(f"max_chunk_size must be positive, got {max_chunk_size}")
        if overlap_size < 0:
            raise ChunkConfigurationError(f"overlap_size must not be negative, got {overlap_size}")
        if overlap_size >= max_chunk_size:
            raise ChunkConfigurationError(
                f"overlap_size ({overlap_size}) must be smaller than max_chunk_size ({max_chunk_size})"
            )
        self.max_chunk_size = max_chunk_size
        self.overlap_size = overlap_size

    @property
    def stride(self) -> int:
        return self.max_chunk_size - self.overlap_size

    def plan(self, total_size: int) -> List[ChunkRange]:
        """Return the ordered ranges covering ``[0, total_size)``."""
        if total_size < 0:
            raise ValueError(f"total_size must not be negative, got {total_size}")

        if total_size <= self.max_chunk_size:
            return [ChunkRange(0, total_size)]

        num_chunks = math.ceil(total_size / self.stride)
        ranges = []
        for i in range(num_chunks):
            start = i * self.stride
            ranges.append(ChunkRange(start, min(start + self.max_chunk_size, total_size)))
        return ranges
