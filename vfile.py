"""Read-only file handles over rendered content."""

import io
import stat
import time
from dataclasses import dataclass


@dataclass
class FileStat:
    """Metadata about an open handle."""
    name: str
    size: int
    mode: int
    mtime: float

    @property
    def is_dir(self) -> bool:
        # Listings are served as file content, never as an index lookup
        return False


class VirtualFile:
    """A seekable, readable view of bytes rendered for one path.

    Every handle owns its own offset. Reading at or past the end returns b"".
    """

    def __init__(self, name: str, data: bytes):
        self.name = name
        self._data = bytes(data)
        self._offset = 0
        self._rendered_at = time.time()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes from the current offset (all remaining if size < 0)."""
        if self._offset >= len(self._data):
            return b""
        end = len(self._data) if size is None or size < 0 else self._offset + size
        chunk = self._data[self._offset:end]
        self._offset += len(chunk)
        return chunk

    def readinto(self, buffer) -> int:
        """Copy bytes into buffer from the current offset and return the count."""
        view = memoryview(buffer).cast("B")
        chunk = self.read(len(view))
        view[:len(chunk)] = chunk
        return len(chunk)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the offset. Negative targets raise ValueError; targets past the end are clamped."""
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._offset + offset
        elif whence == io.SEEK_END:
            target = len(self._data) + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if target < 0:
            raise ValueError(f"Negative seek position {target} in {self.name}")
        self._offset = min(target, len(self._data))
        return self._offset

    def tell(self) -> int:
        return self._offset

    def stat(self) -> FileStat:
        if self.name.endswith("/"):
            mode = stat.S_IFDIR | 0o755
        else:
            mode = stat.S_IFREG | 0o644
        return FileStat(name=self.name, size=len(self._data), mode=mode, mtime=self._rendered_at)

    def readdir(self) -> list:
        """Directory entries are never enumerated; listings are file content."""
        return []

    def close(self):
        pass
