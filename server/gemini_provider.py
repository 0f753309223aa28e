"""Gemini AI provider implementation."""

import ast
import logging
import time
import google.generativeai as genai

from core.interfaces import AIProvider
from core.config import HINT_TYPES

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MAX_HINTS = 4


class GeminiProvider(AIProvider):
    """Gemini AI provider implementation."""

    def __init__(self, api_key: str, model_name: str = 'gemini-2.0-flash'):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.model_name = model_name

    def _execute(self, prompt: str) -> tuple[str, int]:
        # One-shot requests: hints for different users must not share chat history
        start_time = time.time()
        response = self.model.generate_content(prompt)
        end_time = time.time()
        ms = int((end_time - start_time) * 1000)
        return (response.text, ms)

    def _sanitize_hints(self, response: str) -> str:
        s = response.replace('```python', '').replace('```', '')
        s = s[s.find('['):s.rfind(']')+1]
        s = s.replace('null', 'None')
        return s

    def generate_hints(self, word: str, translations: list, error_details: list) -> tuple[list, int]:
        mistakes = [d.get('user_answer') for d in error_details[-5:] if d.get('user_answer')]
        prompt = f"""
            A student learning English vocabulary keeps getting this word wrong.

            Word: "{word}"
            Meanings: {'; '.join(translations) if translations else 'unknown'}
            The student's wrong answers: {', '.join(mistakes) if mistakes else 'none recorded'}

            Write up to {MAX_HINTS} short hints that help the student remember the word.
            Use each of these hint types at most once: {', '.join(HINT_TYPES)}
              similar_words: words with related spelling or meaning, and how they differ
              etymology: the origin or word parts
              usage_example: one natural English sentence using the word
              memory_technique: a mnemonic or association
            If the wrong answers show a specific confusion, address it in one of the hints.
            Each hint must be 1-2 sentences.

            Respond with ONLY a Python list of dictionaries in this exact format:
            [
                {{'hint_type': 'etymology', 'hint_content': '...'}},
                {{'hint_type': 'usage_example', 'hint_content': '...'}}
            ]

            Return ONLY the list, no other text, no markdown formatting.
        """
        response, ms = self._execute(prompt)
        sanitized = self._sanitize_hints(response)

        try:
            parsed = ast.literal_eval(sanitized)
        except (SyntaxError, ValueError) as e:
            logger.error(f"Failed to parse hints: {e}")
            logger.error(f"Raw response:\n{response}")
            logger.error(f"Sanitized response:\n{sanitized}")

            # Try to diagnose the issue
            if '[' not in response:
                logger.error("Diagnosis: No opening bracket '[' found in response")
            elif ']' not in response:
                logger.error("Diagnosis: No closing bracket ']' found in response")
            elif "hint_type" not in response:
                logger.error("Diagnosis: 'hint_type' key not found in response")
            else:
                logger.error("Diagnosis: Unknown parsing issue - possibly malformed Python list syntax")
            return ([], ms)

        if not isinstance(parsed, list):
            logger.warning(f"Hint response is not a list: {type(parsed)}")
            return ([], ms)

        hints = []
        for item in parsed:
            if not isinstance(item, dict):
                continue
            hint_type = item.get('hint_type')
            content = item.get('hint_content')
            if hint_type not in HINT_TYPES or not isinstance(content, str) or not content.strip():
                logger.warning(f"Dropping malformed hint: {item}")
                continue
            hints.append({'hint_type': hint_type, 'hint_content': content.strip()})
        return (hints[:MAX_HINTS], ms)
