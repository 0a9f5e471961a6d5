from __future__ import annotations

import mmap
import os
import stat
import sys
from collections.abc import Iterator

NEWLINE = b"\n"

# Largest length mmap can address on this platform.
MAX_MAPPABLE = sys.maxsize


class MappingLimitError(RuntimeError):
    """Raised when a file is too large to be mapped into memory safely."""


def iter_line_ranges(buf) -> Iterator[tuple[int, int]]:
    """Yield (start, end) byte ranges of the lines in `buf`, last line first.

    A boundary is every newline byte plus the start of the buffer, so a buffer
    containing k newlines yields exactly k + 1 ranges. Newlines are excluded
    from the ranges. `buf` needs `rfind` and `len` (bytes, bytearray, mmap).
    """
    end = len(buf)
    while True:
        nl = buf.rfind(NEWLINE, 0, end)
        yield nl + 1, end
        if nl < 0:
            return
        end = nl


class MappedLog:
    """Read-only memory mapping of a single log file.

    The mapping is held only between `open()`/`__enter__` and `close()`. Line
    views handed out by `reverse_lines()` borrow from the mapping and must be
    released before the mapping is closed.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        st = os.stat(path)
        self._is_file = stat.S_ISREG(st.st_mode)
        self._size = int(st.st_size)
        self._fh = None
        self._mmap: mmap.mmap | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def size(self) -> int:
        """File size in bytes, as reported by stat."""
        return self._size

    @property
    def is_file(self) -> bool:
        return self._is_file

    def open(self) -> MappedLog:
        """Map the file. Requires a regular, non-empty file."""
        if self._size > MAX_MAPPABLE:
            raise MappingLimitError(
                f"the file {self._path} is too large to be safely mapped to memory"
            )
        self._fh = open(self._path, "rb")  # noqa: SIM115
        try:
            self._mmap = mmap.mmap(self._fh.fileno(), length=0, access=mmap.ACCESS_READ)
        except Exception:
            self._fh.close()
            self._fh = None
            raise
        return self

    def close(self) -> None:
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> MappedLog:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def reverse_lines(self) -> Iterator[memoryview]:
        """Yield zero-copy views of each line, from the last line to the first."""
        if self._mmap is None:
            raise ValueError("mapping is not open")
        mm = self._mmap
        with memoryview(mm) as view:
            for start, end in iter_line_ranges(mm):
                yield view[start:end]
