from .file_retriever import DownloadedFile, download_file
from .ocr_processor import OCRProcessor, OCRResult, ocr_processor
from .validation_processor import ValidationProcessor, validation_processor

__all__ = [
    "DownloadedFile",
    "download_file",
    "OCRProcessor",
    "OCRResult",
    "ocr_processor",
    "ValidationProcessor",
    "validation_processor",
]
