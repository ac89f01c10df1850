"""Token counting utilities for prompt size and cost estimates."""

import math
from functools import lru_cache

import tiktoken

# Characters per token for latin text
CHARS_PER_TOKEN = 4
# Tokens per CJK character
CJK_TOKEN_RATIO = 0.7


@lru_cache(maxsize=8)
def _get_encoding(model: str) -> "tiktoken.Encoding":
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        # Unknown models (including Claude ids) use the generic encoding
        return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str, model: str = "gpt-4") -> int:
    """Count tokens with a tiktoken encoding.

    Args:
        text: Text to count tokens for
        model: Model name used to pick the encoding

    Returns:
        Token count
    """
    if not text:
        return 0
    return len(_get_encoding(model).encode(text))


def _is_cjk(char: str) -> bool:
    return (
        "\u4e00" <= char <= "\u9fff"  # CJK Unified Ideographs
        or "\u3040" <= char <= "\u309f"  # Hiragana
        or "\u30a0" <= char <= "\u30ff"  # Katakana
        or "\uac00" <= char <= "\ud7af"  # Hangul
    )


def estimate_tokens(text: str) -> int:
    """Estimate token count without an encoder.

    Roughly one token per four characters, rounded up. CJK characters
    count as 0.7 tokens each.

    Args:
        text: Text to estimate tokens for

    Returns:
        Estimated token count
    """
    if not text:
        return 0

    cjk_count = sum(1 for char in text if _is_cjk(char))
    remaining_chars = len(text) - cjk_count
    return math.ceil(cjk_count * CJK_TOKEN_RATIO) + math.ceil(remaining_chars / CHARS_PER_TOKEN)
