"""Read-only exporters for finished entry collections."""

from .csv_export import CSV_FILENAME, CSV_HEADER, entries_to_csv, entry_rows, write_csv
from .pdf_render import PdfLayout, pdf_filename, render_pdf, write_pdf

__all__ = [
    "CSV_FILENAME",
    "CSV_HEADER",
    "PdfLayout",
    "entries_to_csv",
    "entry_rows",
    "pdf_filename",
    "render_pdf",
    "write_csv",
    "write_pdf",
]
