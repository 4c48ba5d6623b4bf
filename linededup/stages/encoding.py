from __future__ import annotations

import codecs
from typing import Optional

import chardet

from linededup.models import EncodingDecision
from linededup.utils import get_logger

logger = get_logger(__name__)

# Labels widened to a superset so bytes beyond the detection sample still decode.
_WIDEN = {
    "ascii": "utf-8",
}


def resolve_encoding(label: Optional[str]) -> Optional[str]:
    """Map a detector label to a Python codec name, or ``None`` if unknown."""
    if not label:
        return None
    try:
        name = codecs.lookup(label).name
    except LookupError:
        return None
    return codecs.lookup(_WIDEN.get(name, name)).name


def detect_encoding(sample: bytes, *, default: str = "utf-8", min_confidence: float = 0.0) -> EncodingDecision:
    """Best-effort guess of the byte encoding of ``sample``.

    Never fails: an empty sample, an inconclusive or low-confidence guess, or
    a label Python has no codec for all fall back to ``default``.
    """
    fallback = codecs.lookup(default).name
    if not sample:
        return EncodingDecision(label=None, encoding=fallback, confidence=0.0, fallback=True)

    guess = chardet.detect(sample)
    label = guess.get("encoding")
    confidence = float(guess.get("confidence") or 0.0)

    resolved = resolve_encoding(label)
    if resolved is None or confidence < min_confidence:
        logger.debug("encoding.fallback: label=%s confidence=%.2f -> %s", label, confidence, fallback)
        return EncodingDecision(label=label, encoding=fallback, confidence=confidence, fallback=True)

    logger.debug("encoding.detected: label=%s confidence=%.2f -> %s", label, confidence, resolved)
    return EncodingDecision(label=label, encoding=resolved, confidence=confidence)
