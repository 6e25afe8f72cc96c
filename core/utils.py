"""Utility functions for wordbank application."""

import time


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def speakable_example(example: str) -> str:
    """The target-language part of an example sentence.

    Examples come as "Ik drink water. (I drink water.)"; the translation in
    parentheses is dropped.
    """
    if not example:
        return ''
    return example.split('(')[0].strip()


def exclusion_text(words: list[str]) -> str:
    """Prompt fragment listing words the generator must not return."""
    if not words:
        return ''
    return f"Do not use any of the following words: {', '.join(words)}."
