"""AnkiConnect client, note field mapping and file export."""

from .client import AnkiClient
from .exporter import export_to_csv, export_to_txt, write_export
from .field_mapper import NoteFieldMapper

__all__ = [
    "AnkiClient",
    "NoteFieldMapper",
    "export_to_csv",
    "export_to_txt",
    "write_export",
]
