"""
LLM Configuration Module for DSPy

This module provides a centralized way to build DSPy language models for the
Gemini provider and to walk the ordered model ladder used by both the OCR and
the validation calls.
"""
import dspy
import logging
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

import requests

from docscan.config import settings
from docscan.utils.errors import NoAvailableModelError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GEMINI_PROVIDER = "gemini"


class ModelErrorKind(str, Enum):
    MODEL_UNAVAILABLE = "model_unavailable"  # Retired/unknown model or unsupported request
    TRANSIENT = "transient"  # Network, timeout, quota, provider 5xx
    FATAL = "fatal"  # Auth and everything else


_UNAVAILABLE_STATUSES = {400, 404}
_TRANSIENT_STATUSES = {408, 429}


def get_model_status(error: BaseException) -> Optional[int]:
    """Return the HTTP status reported by the provider SDK, if any."""
    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_model_error(error: BaseException) -> ModelErrorKind:
    """
    Classify a provider error so the ladder can branch on a closed type.

    Args:
        error: Exception raised while building or calling a model

    Returns:
        ModelErrorKind: MODEL_UNAVAILABLE for 400/404, TRANSIENT for timeouts,
        throttling, provider 5xx and connection failures, FATAL otherwise
    """
    status = get_model_status(error)
    if status in _UNAVAILABLE_STATUSES:
        return ModelErrorKind.MODEL_UNAVAILABLE
    if status in _TRANSIENT_STATUSES or (status is not None and 500 <= status < 600):
        return ModelErrorKind.TRANSIENT
    if status is None and isinstance(error, (TimeoutError, ConnectionError, requests.RequestException)):
        return ModelErrorKind.TRANSIENT
    return ModelErrorKind.FATAL


def get_dspy_lm(model_name: str) -> dspy.LM:
    """
    Initialize and return a DSPy LM for one Gemini model.

    Args:
        model_name: Bare Gemini model name, e.g. "gemini-2.5-flash"

    Returns:
        dspy.LM: Language model handle; no request is made here

    Raises:
        ValueError: If the Gemini API key is not configured
    """
    if not settings.google_gemini_api_key:
        raise ValueError("google_gemini_api_key must be set to use Gemini models")

    lm = dspy.LM(
        f"{GEMINI_PROVIDER}/{model_name}",
        api_key=settings.google_gemini_api_key,
        temperature=settings.llm_temperature,
        num_retries=settings.llm_num_retries,
        cache=False,
    )
    logger.debug(f"Initialized DSPy LM for {GEMINI_PROVIDER}/{model_name}")
    return lm


def completion_text(outputs: Any) -> str:
    """Return the text of the first completion produced by a dspy.LM call."""
    if not outputs:
        return ""
    first = outputs[0]
    if isinstance(first, dict):
        return first.get("text") or ""
    return first or ""


def run_with_model_ladder(
    call: Callable[[dspy.LM], T],
    purpose: str,
    models: Optional[list[str]] = None,
) -> tuple[T, str]:
    """
    Run `call` against each model of the ladder until one answers.

    Only MODEL_UNAVAILABLE errors move on to the next model. Any other error
    is raised to the caller untouched.

    Args:
        call: Function receiving the model handle and performing the request
        purpose: Short label used in logs and in the exhaustion error
        models: Override for the configured ladder

    Returns:
        tuple: (result of `call`, name of the model that produced it)

    Raises:
        NoAvailableModelError: If every model in the ladder is unavailable
    """
    ladder = models if models is not None else settings.gemini_models
    last_error: Optional[BaseException] = None

    for model_name in ladder:
        try:
            lm = get_dspy_lm(model_name)
            result = call(lm)
        except Exception as e:
            kind = classify_model_error(e)
            if kind is not ModelErrorKind.MODEL_UNAVAILABLE:
                logger.error(f"{purpose} call on {model_name} failed ({kind.value}): {e}")
                raise
            last_error = e
            logger.warning(
                f"Model {model_name} not available for {purpose} "
                f"({get_model_status(e) or 'unknown'}): {str(e)[:100]}"
            )
            continue
        logger.info(f"{purpose} completed with model {model_name}")
        return result, model_name

    logger.error(f"All Gemini models failed for {purpose}: {last_error}")
    raise NoAvailableModelError(purpose, last_error)
