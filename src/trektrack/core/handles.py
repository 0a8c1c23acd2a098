"""Display handles: owned, revocable references to renderable image bytes."""

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class DisplayHandle:
    """A short-lived reference to the bytes a surface renders for one photo.

    The bytes live in a file inside the session's handle directory. Whoever
    holds the handle must call ``release()`` exactly once; after that the
    handle no longer resolves.
    """

    def __init__(self, path: Path, mime_type: str, token: str | None = None):
        self.path = Path(path)
        self.mime_type = mime_type
        self.token = token or uuid.uuid4().hex
        self._released = False

    @classmethod
    def create(cls, directory: Path, data: bytes, mime_type: str, suffix: str = "") -> "DisplayHandle":
        """Write ``data`` into ``directory`` and return a handle to it."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        token = uuid.uuid4().hex
        path = directory / f"{token}{suffix}"
        path.write_bytes(data)
        return cls(path, mime_type, token=token)

    @property
    def released(self) -> bool:
        return self._released

    def read_bytes(self) -> bytes:
        if self._released:
            raise ValueError(f"Display handle {self.token} has been released")
        return self.path.read_bytes()

    def release(self) -> bool:
        """Drop the backing bytes. Returns False if already released."""
        if self._released:
            logger.debug("Display handle %s released twice; ignoring", self.token)
            return False
        self._released = True
        self.path.unlink(missing_ok=True)
        return True

    def __repr__(self) -> str:
        status = "released" if self._released else "live"
        return f"DisplayHandle({self.token}, {self.mime_type}, {status})"
