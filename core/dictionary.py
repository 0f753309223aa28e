"""Word dictionaries loaded from JSON files."""

import json
import logging
import math
import random
from pathlib import Path

from .config import (
    DICTIONARY_CACHE_SIZE, DEFAULT_PAGE_SIZE, SECONDS_PER_WORD, VALIDATION_SAMPLE_SIZE,
    DIFFICULTY_LEVELS, CATEGORIES
)
from .utils import utc_now, to_iso, generate_audio_url

logger = logging.getLogger(__name__)

# Known dictionary files and their display metadata
DICTIONARY_MAPPINGS = {
    'CET4_T.json': {
        'display_name': 'CET-4 Test',
        'description': 'College English Test Band 4 vocabulary for Chinese university students',
        'difficulty_level': 'intermediate',
        'category': 'CET'
    },
    'CET6_T.json': {
        'display_name': 'CET-6 Test',
        'description': 'College English Test Band 6 vocabulary for advanced Chinese university students',
        'difficulty_level': 'advanced',
        'category': 'CET'
    },
    'IELTS_3_T.json': {
        'display_name': 'IELTS Vocabulary',
        'description': 'International English Language Testing System vocabulary for academic and general training',
        'difficulty_level': 'advanced',
        'category': 'IELTS'
    },
    'GRE3000_3_T.json': {
        'display_name': 'GRE 3000 Words',
        'description': 'Graduate Record Examinations 3000 essential vocabulary words',
        'difficulty_level': 'advanced',
        'category': 'GRE'
    },
    'GRE-computer-based-test.json': {
        'display_name': 'GRE Computer-Based Test',
        'description': 'GRE vocabulary specifically for computer-based testing format',
        'difficulty_level': 'advanced',
        'category': 'GRE'
    }
}


class DictionaryNotFoundError(LookupError):
    """Raised for unknown or inactive dictionary ids."""


class WordIndexError(LookupError):
    """Raised when a word index is outside a dictionary."""


class Dictionary:
    """Metadata of one dictionary file."""

    def __init__(self, dictionary_id: str, display_name: str, total_words: int,
                 difficulty_level: str = 'intermediate', category: str = 'General',
                 description: str = '', file_path: str = '', file_size: int = 0,
                 language: str = 'English', is_active: bool = True):
        self.id = dictionary_id
        self.display_name = display_name
        self.description = description
        self.total_words = total_words
        self.difficulty_level = difficulty_level if difficulty_level in DIFFICULTY_LEVELS else 'intermediate'
        self.category = category if category in CATEGORIES else 'Other'
        self.language = language
        self.file_path = file_path
        self.file_size = file_size
        self.is_active = is_active
        self.last_updated = utc_now()

    @property
    def formatted_difficulty(self) -> str:
        return self.difficulty_level.capitalize()

    @property
    def estimated_study_time(self) -> str:
        minutes = math.ceil(self.total_words * SECONDS_PER_WORD / 60)
        if minutes < 60:
            return f"{minutes} minutes"
        hours, remaining = divmod(minutes, 60)
        return f"{hours}h {remaining}m" if remaining else f"{hours} hours"

    def brief(self) -> dict:
        return {
            'id': self.id,
            'display_name': self.display_name,
            'category': self.category,
            'difficulty_level': self.difficulty_level
        }

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'display_name': self.display_name,
            'description': self.description,
            'total_words': self.total_words,
            'difficulty_level': self.difficulty_level,
            'formatted_difficulty': self.formatted_difficulty,
            'category': self.category,
            'language': self.language,
            'estimated_study_time': self.estimated_study_time,
            'is_active': self.is_active
        }


class DictionaryCatalog:
    """Dictionaries found in a directory of JSON word lists.

    Each file holds a JSON array of {name, trans, usphone?, ukphone?} entries.
    Word lists are read on demand and cached for at most cache_size dictionaries.
    """

    def __init__(self, dict_dir: str, mappings: dict = None, cache_size: int = DICTIONARY_CACHE_SIZE):
        self.dict_dir = Path(dict_dir)
        self.mappings = DICTIONARY_MAPPINGS if mappings is None else mappings
        self.cache_size = cache_size
        self.dictionaries = {}
        self.errors = []
        self._word_cache = {}

    def _read_file(self, path: Path) -> list:
        with open(path, 'r', encoding='utf-8') as f:
            words = json.load(f)
        if not isinstance(words, list):
            raise ValueError(f"Invalid format: {path.name} should contain an array of words")
        return words

    def _cache_words(self, dictionary_id: str, words: list) -> None:
        if dictionary_id in self._word_cache or len(self._word_cache) < self.cache_size:
            self._word_cache[dictionary_id] = words

    def load(self) -> list[Dictionary]:
        """Scan the directory and register every mapped dictionary file."""
        self.dictionaries = {}
        self.errors = []
        self._word_cache = {}

        if not self.dict_dir.is_dir():
            logger.warning(f"Dictionary directory not found: {self.dict_dir}")
            self.errors.append({'filename': str(self.dict_dir), 'error': 'Directory not found'})
            return []

        for path in sorted(self.dict_dir.glob('*.json')):
            mapping = self.mappings.get(path.name)
            if mapping is None:
                logger.info(f"Skipping {path.name}: no mapping found")
                self.errors.append({'filename': path.name, 'error': 'No mapping found'})
                continue
            try:
                words = self._read_file(path)
                if not words:
                    raise ValueError(f"Empty dictionary: {path.name} contains no words")
                first = words[0]
                if not isinstance(first, dict) or not first.get('name') or not first.get('trans'):
                    raise ValueError(f"Invalid word structure in {path.name}. Expected 'name' and 'trans' fields")
            except (OSError, ValueError) as e:
                # json.JSONDecodeError is a ValueError
                logger.error(f"Error loading {path.name}: {e}")
                self.errors.append({'filename': path.name, 'error': str(e)})
                continue

            dictionary = Dictionary(
                path.stem,
                mapping['display_name'],
                len(words),
                difficulty_level=mapping.get('difficulty_level', 'intermediate'),
                category=mapping.get('category', 'General'),
                description=mapping.get('description', ''),
                file_path=str(path),
                file_size=path.stat().st_size,
                is_active=mapping.get('is_active', True)
            )
            self.dictionaries[dictionary.id] = dictionary
            self._cache_words(dictionary.id, words)

        logger.info(f"Loaded {len(self.dictionaries)} dictionaries, {len(self.errors)} errors")
        return list(self.dictionaries.values())

    def list_dictionaries(self, category: str = None, difficulty: str = None) -> list[Dictionary]:
        result = [d for d in self.dictionaries.values() if d.is_active]
        if category:
            result = [d for d in result if d.category == category]
        if difficulty:
            result = [d for d in result if d.difficulty_level == difficulty]
        return sorted(result, key=lambda d: (d.category, d.display_name))

    def summary(self) -> dict:
        active = self.list_dictionaries()
        return {
            'total_dictionaries': len(active),
            'total_words': sum(d.total_words for d in active),
            'categories': sorted({d.category for d in active}),
            'difficulty_levels': sorted({d.difficulty_level for d in active})
        }

    def get_dictionary(self, dictionary_id: str) -> Dictionary:
        dictionary = self.dictionaries.get(dictionary_id)
        if dictionary is None:
            raise DictionaryNotFoundError(f"Dictionary not found: {dictionary_id}")
        if not dictionary.is_active:
            raise DictionaryNotFoundError(f"Dictionary is not active: {dictionary_id}")
        return dictionary

    def _words(self, dictionary: Dictionary) -> list:
        words = self._word_cache.get(dictionary.id)
        if words is None:
            try:
                words = self._read_file(Path(dictionary.file_path))
            except FileNotFoundError:
                raise DictionaryNotFoundError(f"Dictionary file not found: {dictionary.file_path}")
            self._cache_words(dictionary.id, words)
        return words

    @staticmethod
    def _entry(word: dict, index: int) -> dict:
        return {**word, 'index': index, 'audio_url': generate_audio_url(word.get('name', ''))}

    def get_words(self, dictionary_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
                  start_index: int = None) -> dict:
        """One page of words with pagination info.

        start_index, when given, takes precedence over page.
        """
        dictionary = self.get_dictionary(dictionary_id)
        words = self._words(dictionary)
        total = len(words)

        start = start_index if start_index is not None else (page - 1) * limit
        start = max(0, min(start, total - 1))
        end = min(start + limit, total)

        return {
            'words': [self._entry(words[i], i) for i in range(start, end)],
            'pagination': {
                'current_page': start // limit + 1,
                'total_pages': math.ceil(total / limit),
                'total_words': total,
                'limit': limit,
                'start_index': start,
                'end_index': end - 1,
                'has_next': end < total,
                'has_previous': start > 0
            },
            'dictionary': dictionary.brief()
        }

    def get_word(self, dictionary_id: str, index: int) -> dict:
        dictionary = self.get_dictionary(dictionary_id)
        words = self._words(dictionary)
        if index < 0 or index >= len(words):
            raise WordIndexError(
                f"Word index {index} out of range. Dictionary has {len(words)} words.")
        entry = self._entry(words[index], index)
        entry['dictionary'] = dictionary.brief()
        return entry

    def search(self, dictionary_id: str, term: str, limit: int = 20) -> dict:
        """Case-insensitive search on word names, then translations."""
        dictionary = self.get_dictionary(dictionary_id)
        needle = term.lower()
        matches = []
        for index, word in enumerate(self._words(dictionary)):
            if len(matches) >= limit:
                break
            if needle in str(word.get('name', '')).lower():
                matches.append({**self._entry(word, index), 'match_type': 'name'})
                continue
            translations = word.get('trans')
            if isinstance(translations, list) and any(needle in str(t).lower() for t in translations):
                matches.append({**self._entry(word, index), 'match_type': 'translation'})

        return {
            'words': matches,
            'search_term': term,
            'total_matches': len(matches),
            'dictionary': dictionary.brief()
        }

    def random_words(self, dictionary_id: str, count: int = 10) -> dict:
        dictionary = self.get_dictionary(dictionary_id)
        words = self._words(dictionary)
        indices = random.sample(range(len(words)), min(count, len(words)))
        return {
            'words': [self._entry(words[i], i) for i in indices],
            'count': len(indices),
            'dictionary': dictionary.brief()
        }

    def stats(self, dictionary_id: str) -> dict:
        dictionary = self.get_dictionary(dictionary_id)
        return {
            **dictionary.to_dict(),
            'file_size': dictionary.file_size,
            'last_updated': to_iso(dictionary.last_updated)
        }

    def validate(self, dictionary_id: str) -> dict:
        """Re-read the file and check the structure of its first entries."""
        dictionary = self.get_dictionary(dictionary_id)
        issues = []
        try:
            words = self._read_file(Path(dictionary.file_path))
        except (OSError, ValueError) as e:
            logger.error(f"Validation of {dictionary_id} failed: {e}")
            words = []
            issues.append(str(e))

        for i, word in enumerate(words[:VALIDATION_SAMPLE_SIZE]):
            if not isinstance(word, dict) or not isinstance(word.get('name'), str) or not word.get('name'):
                issues.append(f"Word at index {i}: invalid or missing 'name' field")
            if not isinstance(word, dict) or not isinstance(word.get('trans'), list):
                issues.append(f"Word at index {i}: invalid or missing 'trans' field")

        return {
            'is_valid': not issues,
            'total_words': len(words),
            'expected_words': dictionary.total_words,
            'issues': issues,
            'last_checked': to_iso(utc_now())
        }

    def clear_cache(self, dictionary_id: str = None) -> None:
        if dictionary_id is None:
            self._word_cache.clear()
        else:
            self._word_cache.pop(dictionary_id, None)

    def cached_ids(self) -> list[str]:
        return list(self._word_cache)
