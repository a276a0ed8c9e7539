"""Token estimation helpers."""

import tiktoken

from agentflow.utils.logging import get_logger

logger = get_logger(__name__)

_tokenizer: tiktoken.Encoding | None = None
_tokenizer_loaded = False


def get_tokenizer() -> tiktoken.Encoding | None:
    """Get the shared tokenizer, or None when the encoding cannot be loaded."""
    global _tokenizer, _tokenizer_loaded

    if not _tokenizer_loaded:
        _tokenizer_loaded = True
        try:
            _tokenizer = tiktoken.get_encoding("cl100k_base")
        except Exception as e:
            logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
            _tokenizer = None

    return _tokenizer


def estimate_tokens(text: str, tokenizer: tiktoken.Encoding | None = None) -> int:
    """Estimate token count for a piece of text.

    Args:
        text: Text to measure
        tokenizer: Tokenizer to use (defaults to the shared one)

    Returns:
        Estimated token count
    """
    if not text:
        return 0

    encoder = tokenizer or get_tokenizer()
    try:
        return len(encoder.encode(text)) if encoder else len(text) // 4
    except Exception:
        # Fallback: roughly 4 characters per token
        return len(text) // 4
