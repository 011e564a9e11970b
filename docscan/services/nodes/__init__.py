from .resolve_document_node import resolve_document
from .download_node import download_document
from .ocr_node import extract_ocr
from .validation_node import validate_document
from .persist_node import persist_validation

__all__ = [
    "resolve_document",
    "download_document",
    "extract_ocr",
    "validate_document",
    "persist_validation",
]
