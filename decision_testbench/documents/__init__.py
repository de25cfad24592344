"""Documents domain - reading rule files."""

from .service import read_file_safely, DocumentsService

__all__ = ["read_file_safely", "DocumentsService"]
