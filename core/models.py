"""Domain models for wordbank application."""

from enum import Enum

from .config import CEFR_LEVELS, INITIAL_LEVEL


class Mode(str, Enum):
    """Practice session modes."""
    REVIEW = 'review'
    LEARN = 'learn'
    FINAL_REVIEW = 'final-review'
    SESSION_OVER = 'session-over'


class Signal(str, Enum):
    """Learner feedback on the current card.

    What a signal does depends on the session mode, see SessionEngine.
    """
    KNOWN = 'known'          # "I know it"
    DEFERRED = 'deferred'    # "Remind me later"
    REFRESHED = 'refreshed'  # "New word", save it to the bank (learn mode only)


# How a word entered the bank
STATUS_DEFERRED = 'deferred'
STATUS_RETAINED = 'retained'

# Document shape written by earlier clients
_LEGACY_STATUS = {'remind': STATUS_DEFERRED, 'refresh': STATUS_RETAINED}


def is_valid_level(level: str) -> bool:
    return level in CEFR_LEVELS


def promote_level(level: str) -> str:
    """Next level up, or the same level at the top."""
    index = CEFR_LEVELS.index(level)
    if index < len(CEFR_LEVELS) - 1:
        return CEFR_LEVELS[index + 1]
    return level


def demote_level(level: str) -> str:
    """Next level down, or the same level at the bottom."""
    index = CEFR_LEVELS.index(level)
    if index > 0:
        return CEFR_LEVELS[index - 1]
    return level


def make_word_id(word: str, language: str) -> str:
    return f"{word}-{language}"


class Word:
    """A vocabulary item minted by the word source."""

    def __init__(self, word: str, translation: str, level: str, language: str,
                 example: str = '', id: str = None):
        self.id = id or make_word_id(word, language)
        self.word = word
        self.translation = translation
        self.level = level
        self.language = language
        self.example = example

    def __repr__(self) -> str:
        return f"Word({self.word!r}, {self.level})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'word': self.word,
            'translation': self.translation,
            'level': self.level,
            'language': self.language,
            'example': self.example
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Word':
        return cls(
            data['word'],
            data.get('translation', ''),
            data.get('level', INITIAL_LEVEL),
            data.get('language', ''),
            data.get('example', ''),
            id=data.get('id')
        )


class WordRecord(Word):
    """A word in the learner's bank, with its spaced-repetition schedule."""

    def __init__(self, word: str, translation: str, level: str, language: str,
                 example: str = '', id: str = None, status: str = STATUS_DEFERRED,
                 mastery_rank: int = 1, last_reviewed_at: int = 0, next_review_at: int = 0):
        super().__init__(word, translation, level, language, example, id=id)
        self.status = status
        self.mastery_rank = mastery_rank
        self.last_reviewed_at = last_reviewed_at
        self.next_review_at = next_review_at

    def __repr__(self) -> str:
        return f"WordRecord({self.word!r}, rank={self.mastery_rank}, next={self.next_review_at})"

    @classmethod
    def from_word(cls, word: Word, status: str) -> 'WordRecord':
        return cls(word.word, word.translation, word.level, word.language,
                   word.example, id=word.id, status=status)

    @property
    def is_cleared(self) -> bool:
        return self.mastery_rank < 1

    def is_due(self, now: int) -> bool:
        return self.next_review_at <= now

    def copy(self) -> 'WordRecord':
        return WordRecord.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'status': self.status,
            'mastery_rank': self.mastery_rank,
            'last_reviewed_at': self.last_reviewed_at,
            'next_review_at': self.next_review_at
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'WordRecord':
        status = data.get('status', STATUS_DEFERRED)
        status = _LEGACY_STATUS.get(status, status)
        rank = data.get('mastery_rank', data.get('srsLevel', 1))
        return cls(
            data['word'],
            data.get('translation', ''),
            data.get('level', INITIAL_LEVEL),
            data.get('language', ''),
            data.get('example', ''),
            id=data.get('id'),
            status=status,
            mastery_rank=int(rank),
            last_reviewed_at=int(data.get('last_reviewed_at', data.get('lastReviewed', 0))),
            next_review_at=int(data.get('next_review_at', data.get('nextReview', 0)))
        )


class WordBank:
    """Live word records for one profile and language, keyed by word id.

    Iteration follows insertion order, which is the order due reviews are
    queued in. Cleared (tombstoned) records are never held here.
    """

    def __init__(self, records: list = None):
        self._records = {}
        for record in records or []:
            if not record.is_cleared:
                self._records[record.id] = record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records.values()))

    def __contains__(self, word_id: str) -> bool:
        return word_id in self._records

    def get(self, word_id: str) -> WordRecord | None:
        return self._records.get(word_id)

    def records(self) -> list[WordRecord]:
        return list(self._records.values())

    def upsert(self, record: WordRecord) -> None:
        if record.is_cleared:
            self._records.pop(record.id, None)
        else:
            self._records[record.id] = record

    def clear(self) -> None:
        self._records = {}

    def due(self, now: int) -> list[WordRecord]:
        return [r for r in self._records.values() if r.is_due(now)]

    def surface_forms(self) -> list[str]:
        return [r.word for r in self._records.values()]

    def by_rank(self) -> dict[int, list[WordRecord]]:
        """Group records by mastery rank, lowest rank first."""
        groups = {}
        for record in self._records.values():
            groups.setdefault(record.mastery_rank, []).append(record)
        return {rank: groups[rank] for rank in sorted(groups)}


class SessionLogEntry:
    """Summary of one finished practice session. Never mutated."""

    def __init__(self, timestamp: int, duration: int, total_words: int,
                 new_words: int, end_level: str):
        self.timestamp = timestamp
        self.duration = duration
        self.total_words = total_words
        self.new_words = new_words
        self.end_level = end_level

    def __repr__(self) -> str:
        return (f"SessionLogEntry(total={self.total_words}, new={self.new_words}, "
                f"level={self.end_level})")

    def __eq__(self, other) -> bool:
        if not isinstance(other, SessionLogEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'duration': self.duration,
            'total_words': self.total_words,
            'new_words': self.new_words,
            'end_level': self.end_level
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionLogEntry':
        return cls(
            int(data['timestamp']),
            int(data.get('duration', 0)),
            int(data.get('total_words', data.get('totalWords', 0))),
            int(data.get('new_words', data.get('newWords', 0))),
            data.get('end_level', data.get('endLevel', INITIAL_LEVEL))
        )


class ProfileData:
    """Everything stored for one profile and language."""

    def __init__(self, records: list = None, logs: list = None, level: str = INITIAL_LEVEL):
        self.records = records or []
        self.logs = logs or []
        self.level = level

    def to_dict(self) -> dict:
        return {
            'word_bank': [r.to_dict() for r in self.records],
            'logs': [log.to_dict() for log in self.logs],
            'level': self.level
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ProfileData':
        return cls(
            [WordRecord.from_dict(r) for r in data.get('word_bank', [])],
            [SessionLogEntry.from_dict(entry) for entry in data.get('logs', [])],
            data.get('level') or INITIAL_LEVEL
        )
