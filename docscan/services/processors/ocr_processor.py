import base64
import logging
from dataclasses import dataclass

import dspy

from docscan.utils.llm_config import completion_text, run_with_model_ladder

logger = logging.getLogger(__name__)

OCR_PROMPT = "Extract all text from this document. Return only the extracted text, nothing else."


@dataclass
class OCRResult:
    text: str
    method: str
    model: str


def build_ocr_messages(content: bytes, mime_type: str) -> list[dict]:
    """Chat messages carrying the document inline, followed by the OCR instruction."""
    encoded = base64.b64encode(content).decode("ascii")
    return [
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                {"type": "text", "text": OCR_PROMPT},
            ],
        }
    ]


class OCRProcessor:
    """Text extraction through a vision-capable Gemini model."""

    method = "gemini"

    def extract_text(self, content: bytes, mime_type: str) -> OCRResult:
        """
        Extract plain text from document bytes.

        Walks the model ladder; a model that is retired or unsupported is
        skipped, any other provider error is raised as-is.

        Args:
            content: Raw document bytes (image or PDF)
            mime_type: Media type sent along with the inline data

        Returns:
            OCRResult with the trimmed text, method tag and model used

        Raises:
            NoAvailableModelError: If no model in the ladder is available
        """
        messages = build_ocr_messages(content, mime_type)

        def _call(lm: dspy.LM) -> str:
            return completion_text(lm(messages=messages))

        text, model_name = run_with_model_ladder(_call, purpose="OCR")
        text = text.strip()
        logger.info(f"OCR extraction completed with {model_name}: {len(text)} characters")
        return OCRResult(text=text, method=self.method, model=model_name)


ocr_processor = OCRProcessor()
