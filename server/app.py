"""FastAPI server for wordbank application.

Persists per-profile state and proxies word generation. The practice
session itself runs in the client.
"""

import asyncio
import logging
import os

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from core.config import CEFR_LEVELS, GEMINI_MODEL, LANGUAGES
from core.errors import GenerationError, PersistenceError, ProfileLoadError
from core.interfaces import ProfileStore, WordSource
from core.models import SessionLogEntry, WordRecord, is_valid_level
from core.stats import summarize_logs

from server.file_storage import FileStorage
from server.gemini_provider import GeminiWordSource
from server.postgres_storage import PostgresStorage

logger = logging.getLogger(__name__)


# Pydantic models for API
class WordPayload(BaseModel):
    id: str
    word: str
    translation: str = ''
    level: str
    language: str = ''
    example: str = ''
    status: str = 'deferred'
    mastery_rank: int
    last_reviewed_at: int
    next_review_at: int


class LogPayload(BaseModel):
    timestamp: int
    duration: int = 0
    total_words: int = 0
    new_words: int = 0
    end_level: str


class WordRequest(BaseModel):
    profile_id: str
    language: str
    word: WordPayload


class LogRequest(BaseModel):
    profile_id: str
    language: str
    log: LogPayload


class LevelRequest(BaseModel):
    profile_id: str
    language: str
    level: str


class GenerateWordRequest(BaseModel):
    language: str
    level: str
    exclusions: list[str] = Field(default_factory=list)


class GeneratedWordResponse(BaseModel):
    word: str
    level: str
    translation: str
    example: str


class ProfileDataResponse(BaseModel):
    word_bank: list[dict]
    logs: list[dict]
    level: str


class StatsResponse(BaseModel):
    sessions: int
    total_duration: int
    total_words: int
    total_new_words: int


# Global state (in production, use proper DI)
storage: ProfileStore = None
word_source: WordSource = None


app = FastAPI(title="Wordbank API", description="Spaced-repetition vocabulary trainer API")


@app.on_event("startup")
async def startup():
    """Initialize storage and word source on startup."""
    global storage, word_source

    # Use file storage by default, set WORDBANK_STORAGE=postgres to use PostgreSQL
    storage_type = os.environ.get('WORDBANK_STORAGE', 'file')
    if storage_type == 'postgres':
        storage = PostgresStorage()
        logger.info("Using PostgreSQL storage")
    else:
        storage = FileStorage()
        logger.info("Using file storage")

    # Get API key from environment variable first, then fall back to config file
    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        try:
            config = storage.load_config()
            api_key = config.get('gemini_api_key')
        except FileNotFoundError:
            pass

    if not api_key:
        raise RuntimeError(
            "GEMINI_API_KEY environment variable not set and config file not found. "
            "Set GEMINI_API_KEY or create ~/.config/wordbank/config.json"
        )

    model_name = os.environ.get('GEMINI_MODEL', GEMINI_MODEL)
    word_source = GeminiWordSource(api_key, model_name=model_name)
    logger.info(f"Word source initialized: {model_name}")


def _check_level(level: str) -> None:
    if not is_valid_level(level):
        raise HTTPException(status_code=422, detail=f"Unknown level {level!r}, expected one of {CEFR_LEVELS}")


@app.get("/")
async def root():
    """Health check."""
    return {"service": "wordbank", "status": "ok"}


@app.get("/api/languages")
async def list_languages():
    """List supported target languages with their speech locales."""
    return {"languages": [{"name": name, "code": code} for name, code in LANGUAGES.items()]}


@app.get("/api/data", response_model=ProfileDataResponse)
async def get_data(profile_id: str, language: str):
    """Get word bank, session logs and level for a profile and language."""
    try:
        data = storage.read_all(profile_id, language)
    except ProfileLoadError as e:
        logger.error(f"Error fetching data for {profile_id}/{language}: {e}")
        raise HTTPException(status_code=500, detail="Could not load profile")
    return ProfileDataResponse(**data.to_dict())


@app.post("/api/word", status_code=201)
async def update_word(request: WordRequest):
    """Add or update a word in the word bank."""
    record = WordRecord.from_dict(request.word.model_dump())
    try:
        storage.upsert_record(request.profile_id, request.language, record)
    except PersistenceError as e:
        logger.error(f"Error updating word {record.id}: {e}")
        raise HTTPException(status_code=500, detail="Could not save word")
    return {"message": "Word updated successfully"}


@app.post("/api/log", status_code=201)
async def add_log(request: LogRequest):
    """Append a session log entry."""
    _check_level(request.log.end_level)
    entry = SessionLogEntry.from_dict(request.log.model_dump())
    try:
        storage.append_log(request.profile_id, request.language, entry)
    except PersistenceError as e:
        logger.error(f"Error adding log: {e}")
        raise HTTPException(status_code=500, detail="Could not save log")
    return {"message": "Log added successfully"}


@app.put("/api/level")
async def update_level(request: LevelRequest):
    """Store the last used difficulty level."""
    _check_level(request.level)
    try:
        storage.set_level(request.profile_id, request.language, request.level)
    except PersistenceError as e:
        logger.error(f"Error updating level: {e}")
        raise HTTPException(status_code=500, detail="Could not save level")
    return {"message": "Level updated successfully"}


@app.post("/api/generate-word", response_model=GeneratedWordResponse)
async def generate_word(request: GenerateWordRequest):
    """Generate one new vocabulary word."""
    _check_level(request.level)
    try:
        # Run in executor to not block the event loop
        loop = asyncio.get_event_loop()
        word = await loop.run_in_executor(
            None,
            lambda: word_source.request_word(request.language, request.level, request.exclusions)
        )
    except GenerationError as e:
        logger.error(f"Error generating word: {e}")
        raise HTTPException(status_code=502, detail=f"Word generation failed: {e}")
    return GeneratedWordResponse(
        word=word.word,
        level=word.level,
        translation=word.translation,
        example=word.example
    )


@app.get("/api/stats", response_model=StatsResponse)
async def get_stats(profile_id: str, language: str):
    """Get session totals for a profile and language."""
    try:
        data = storage.read_all(profile_id, language)
    except ProfileLoadError as e:
        logger.error(f"Error fetching stats for {profile_id}/{language}: {e}")
        raise HTTPException(status_code=500, detail="Could not load profile")
    return StatsResponse(**summarize_logs(data.logs))


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
