"""Gemini word source implementation."""

import json
import logging
import time
import google.generativeai as genai

from core.config import GEMINI_MODEL
from core.errors import GenerationError
from core.interfaces import WordSource
from core.models import Word
from core.utils import exclusion_text

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REQUIRED_KEYS = ['word', 'level', 'translation', 'example']


class GeminiWordSource(WordSource):
    """Mints vocabulary items with a Gemini model."""

    def __init__(self, api_key: str, model_name: str = GEMINI_MODEL):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.model_name = model_name

    def _execute(self, prompt: str) -> tuple[str, int]:
        start_time = time.time()
        response = self.model.generate_content(
            prompt,
            generation_config={'response_mime_type': 'application/json'}
        )
        end_time = time.time()
        ms = int((end_time - start_time) * 1000)
        return (response.text, ms)

    def _parse_word(self, text: str) -> dict:
        """Extract the word dict from a model response."""
        s = text.strip().replace('```json', '').replace('```', '')
        s = s[s.find('{'):s.rfind('}') + 1]
        try:
            data = json.loads(s)
        except ValueError as e:
            logger.error(f"Failed to parse word: {e}")
            logger.error(f"Raw response:\n{text}")
            if '{' not in text:
                logger.error("Diagnosis: No opening brace '{' found in response")
            elif '}' not in text:
                logger.error("Diagnosis: No closing brace '}' found in response")
            raise GenerationError("Malformed response from word generator") from e

        if not isinstance(data, dict):
            raise GenerationError(f"Expected an object from word generator, got {type(data).__name__}")
        missing_keys = [k for k in REQUIRED_KEYS if not data.get(k)]
        if missing_keys:
            logger.warning(f"AI response missing keys: {missing_keys}")
            logger.warning(f"Raw response:\n{text}")
            raise GenerationError(f"Word generator response missing {', '.join(missing_keys)}")
        return {k: str(data[k]).strip() for k in REQUIRED_KEYS}

    def generate(self, language: str, level: str, exclusions: list[str]) -> dict:
        """Ask the model for one word. Returns {word, level, translation, example}."""
        prompt = f"""
            Generate a single, common vocabulary word for a language learner.
            Language: {language}. CEFR Level: {level}.
            Provide the word, its CEFR level, its English translation, and a simple example
            sentence using the word in {language} with its English translation in parentheses.
            {exclusion_text(exclusions)}
            Ensure the word strictly belongs to the specified CEFR level.

            Respond with ONLY a JSON object with these string keys:
            "word", "level", "translation", "example"
        """
        try:
            response, ms = self._execute(prompt)
        except Exception as e:
            logger.error(f"Gemini request failed: {type(e).__name__}: {e}")
            raise GenerationError(f"Word generator unavailable: {e}") from e
        data = self._parse_word(response)
        logger.info(f"Generated {data['word']!r} ({data['level']}) for {language} in {ms}ms")
        return data

    def request_word(self, language: str, level: str, exclusions: list[str]) -> Word:
        data = self.generate(language, level, exclusions)
        return Word(data['word'], data['translation'], data['level'], language, data['example'])
