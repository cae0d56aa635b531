"""Destinations for finalized capture blobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from .file_paths import safe_filename

logger = logging.getLogger(__name__)

CSV_MIME_TYPE = "text/plain;charset=utf-8"


class FileExporter(Protocol):
    """Receives one finished capture; how it is persisted is up to the implementation."""

    def __call__(self, blob: bytes, mime_type: str, filename: str) -> Optional[Path]:  # pragma: no cover
        ...


class DirectoryExporter:
    """Write each blob under ``root`` using the suggested file name."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def __call__(self, blob: bytes, mime_type: str, filename: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / safe_filename(filename)
        path.write_bytes(blob)
        logger.info("Saved %s (%d bytes, %s)", path, len(blob), mime_type)
        return path


@dataclass
class ExportedFile:
    blob: bytes
    mime_type: str
    filename: str

    @property
    def text(self) -> str:
        return self.blob.decode("utf-8")


@dataclass
class MemoryExporter:
    """Keep exported blobs in memory, e.g. for a GUI that offers a save dialog later."""

    files: List[ExportedFile] = field(default_factory=list)

    def __call__(self, blob: bytes, mime_type: str, filename: str) -> None:
        self.files.append(ExportedFile(blob, mime_type, filename))
        return None

    @property
    def last(self) -> ExportedFile:
        if not self.files:
            raise LookupError("nothing exported yet")
        return self.files[-1]
