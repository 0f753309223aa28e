from .models import WordProgress, WrongWord, UserDictionary
from .interfaces import AIProvider, Storage
from .dictionary import (
    Dictionary, DictionaryCatalog, DictionaryNotFoundError, WordIndexError, DICTIONARY_MAPPINGS
)
from .learning import (
    LearningService, ProgressNotFoundError, WrongWordNotFoundError, HintNotFoundError,
    DictionaryCompletedError
)
from .ranking import rank_by_urgency, review_queue_entry, sort_wrong_words
from .utils import generate_audio_url
from .config import (
    MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL,
    DEFAULT_INTERVAL_DAYS, DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR,
    MIN_DIFFICULTY, MAX_DIFFICULTY,
    ERROR_TYPES, REVIEW_METHODS, HINT_TYPES
)

__all__ = [
    'WordProgress', 'WrongWord', 'UserDictionary',
    'AIProvider', 'Storage',
    'Dictionary', 'DictionaryCatalog', 'DictionaryNotFoundError', 'WordIndexError',
    'DICTIONARY_MAPPINGS',
    'LearningService', 'ProgressNotFoundError', 'WrongWordNotFoundError', 'HintNotFoundError',
    'DictionaryCompletedError',
    'rank_by_urgency', 'review_queue_entry', 'sort_wrong_words',
    'generate_audio_url',
    'MIN_MASTERY_LEVEL', 'MAX_MASTERY_LEVEL',
    'DEFAULT_INTERVAL_DAYS', 'DEFAULT_EASE_FACTOR', 'MIN_EASE_FACTOR',
    'MIN_DIFFICULTY', 'MAX_DIFFICULTY',
    'ERROR_TYPES', 'REVIEW_METHODS', 'HINT_TYPES'
]
