"""Spaced-repetition schedule table and record update rules."""

from .config import MAX_RANK, SCHEDULE
from .models import Word, WordRecord


def clamp_rank(rank: int) -> int:
    return max(1, min(rank, MAX_RANK))


def delay_for(rank: int) -> int:
    """Re-exposure delay in ms for a mastery rank."""
    return SCHEDULE[clamp_rank(rank)]


def reschedule(record: WordRecord, rank: int, now: int) -> WordRecord:
    """Move a record to a new rank and schedule its next review from now."""
    rank = clamp_rank(rank)
    record.mastery_rank = rank
    record.last_reviewed_at = now
    record.next_review_at = now + SCHEDULE[rank]
    return record


def new_record(word: Word, status: str, now: int) -> WordRecord:
    """Create the bank record for a word seen for the first time."""
    return reschedule(WordRecord.from_word(word, status), 1, now)
