import re
from graph.state import Language, MessageState
from loguru import logger

# Checked in order; the first script found wins, not the dominant one.
SCRIPT_PATTERNS = [
    (Language.HI, re.compile("[\u0900-\u097F]")),  # Devanagari
    (Language.KN, re.compile("[\u0C80-\u0CFF]")),  # Kannada
    (Language.TA, re.compile("[\u0B80-\u0BFF]")),  # Tamil
    (Language.TE, re.compile("[\u0C00-\u0C7F]")),  # Telugu
]


def detect_language(text: str) -> Language:
    """Classify text by the first Indic script it contains, defaulting to English."""
    for language, pattern in SCRIPT_PATTERNS:
        if pattern.search(text or ""):
            return language
    return Language.EN


def detect(state: MessageState) -> MessageState:
    """Attach the detected language to the message state."""
    language = detect_language(state["message"].text)
    logger.info(f"Detected language: {language.value}")
    return {"language": language}
