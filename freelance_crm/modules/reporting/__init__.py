"""CSV and plain-text exports."""

from .emitter import DirectoryEmitter, FileEmitter
from .export import (
    ExportDocument,
    ExportKind,
    build_document,
    export_filename,
    format_amount,
    format_money,
    to_narrative,
    to_tabular,
)

__all__ = [
    'DirectoryEmitter', 'FileEmitter', 'ExportDocument', 'ExportKind',
    'build_document', 'export_filename', 'format_amount', 'format_money',
    'to_narrative', 'to_tabular',
]
