"""Hand finished export documents to the user.

The UI would trigger a browser download; the CLI writes into a directory.
"""
import logging
from pathlib import Path
from typing import Protocol

from .export import ExportDocument

logger = logging.getLogger(__name__)


class FileEmitter(Protocol):
    """Receives (content, filename, MIME type) and makes it available."""

    def emit(self, document: ExportDocument) -> Path:
        ...


class DirectoryEmitter:
    """Writes documents into an output directory, overwriting same-day files."""

    def __init__(self, output_dir: Path = Path("output")):
        self.output_dir = Path(output_dir)

    def emit(self, document: ExportDocument) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / document.filename
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(document.content)
        logger.info(
            f"Exported {document.filename} ({document.mime_type}, "
            f"{path.stat().st_size / 1024:.1f} KB) → {path}"
        )
        return path
