"""Learning service: ties storage, the dictionary catalog and the domain models together."""

from datetime import datetime

from .config import (
    NEUTRAL_DIFFICULTY, HIGH_PRIORITY, DEFAULT_WRONG_WORDS_LIMIT, DEFAULT_REVIEW_QUEUE_LIMIT
)
from .dictionary import DictionaryCatalog, WordIndexError
from .interfaces import AIProvider, Storage
from .models import WordProgress, WrongWord, UserDictionary
from .ranking import (
    rank_by_urgency, review_queue_entry, sort_wrong_words, high_priority, summarize, analytics
)
from .utils import utc_now, to_iso, round2


class ProgressNotFoundError(LookupError):
    """Raised when a user has no progress record for a dictionary or word."""


class WrongWordNotFoundError(LookupError):
    """Raised for unknown wrong word ids."""


class HintNotFoundError(LookupError):
    """Raised when rating a hint that does not exist."""


class DictionaryCompletedError(ValueError):
    """Raised when asking for the current word of a completed dictionary."""


class LearningService:
    """Per-request operations of the learning API.

    Every operation is a load, mutate, save cycle over plain dicts from the
    storage backend. Pass `now` to pin the clock.
    """

    def __init__(self, storage: Storage, catalog: DictionaryCatalog):
        self.storage = storage
        self.catalog = catalog

    # Loading helpers

    def _load_user_dictionary(self, user_id: str, dictionary_id: str) -> UserDictionary | None:
        data = self.storage.load_user_dictionary(user_id, dictionary_id)
        return UserDictionary.from_dict(data) if data else None

    def _require_user_dictionary(self, user_id: str, dictionary_id: str) -> UserDictionary:
        progress = self._load_user_dictionary(user_id, dictionary_id)
        if progress is None:
            raise ProgressNotFoundError(
                f"No progress for dictionary {dictionary_id}. Please start the dictionary first")
        return progress

    def _load_word_progress(self, user_id: str, dictionary_id: str, word: str) -> WordProgress | None:
        data = self.storage.load_word_progress(user_id, dictionary_id, word)
        return WordProgress.from_dict(data) if data else None

    def _require_word_progress(self, user_id: str, dictionary_id: str, word: str) -> WordProgress:
        progress = self._load_word_progress(user_id, dictionary_id, word)
        if progress is None:
            raise ProgressNotFoundError(f"No progress for word '{word}' in {dictionary_id}")
        return progress

    def _require_wrong_word(self, user_id: str, wrong_word_id: str) -> WrongWord:
        data = self.storage.load_wrong_word_by_id(user_id, wrong_word_id)
        if data is None:
            raise WrongWordNotFoundError(f"Wrong word not found: {wrong_word_id}")
        return WrongWord.from_dict(data)

    def _wrong_words(self, user_id: str, dictionary_id: str = None,
                     include_resolved: bool = True) -> list[WrongWord]:
        rows = self.storage.list_wrong_words(user_id, dictionary_id, include_resolved)
        return [WrongWord.from_dict(row) for row in rows]

    def _word_progress_list(self, user_id: str, dictionary_id: str = None) -> list[WordProgress]:
        return [WordProgress.from_dict(row)
                for row in self.storage.list_word_progress(user_id, dictionary_id)]

    # Dictionary progress

    def start_dictionary(self, user_id: str, dictionary_id: str, now: datetime = None) -> UserDictionary:
        """Start or resume a dictionary, creating the progress record if needed."""
        dictionary = self.catalog.get_dictionary(dictionary_id)
        progress = self._load_user_dictionary(user_id, dictionary_id)
        if progress is None:
            progress = UserDictionary(user_id, dictionary_id, dictionary.total_words, now)
        progress.start(now)
        self.storage.save_user_dictionary(progress.to_dict())
        return progress

    def current_word(self, user_id: str, dictionary_id: str, now: datetime = None) -> dict:
        """The word at the user's position, with any earlier progress on it."""
        self.catalog.get_dictionary(dictionary_id)
        progress = self._load_user_dictionary(user_id, dictionary_id)
        if progress is None:
            progress = self.start_dictionary(user_id, dictionary_id, now)
        if progress.status == 'completed':
            raise DictionaryCompletedError("All words in this dictionary have been completed")

        word = self.catalog.get_word(dictionary_id, progress.current_position)
        word_progress = self._load_word_progress(user_id, dictionary_id, word['name'])
        word['progress'] = word_progress.summary(now) if word_progress else None
        return {
            'word': word,
            'dictionary_progress': progress.summary()
        }

    def submit_answer(self, user_id: str, dictionary_id: str, word: str, is_correct: bool,
                      word_index: int = None, user_answer: str = '', response_time: float = 0,
                      user_difficulty: int = None, submission_id: str = None,
                      now: datetime = None) -> dict:
        """Grade one answer: update dictionary, word and wrong word progress, then advance.

        A repeated submission_id replays the stored result without counting again.
        """
        now = now or utc_now()
        if submission_id:
            stored = self.storage.load_submission(user_id, submission_id)
            if stored is not None:
                return {**stored, 'duplicate': True}

        self.catalog.get_dictionary(dictionary_id)
        dictionary_progress = self._require_user_dictionary(user_id, dictionary_id)
        index = word_index if word_index is not None else dictionary_progress.current_position

        word_data = None
        if not is_correct:
            # Resolve the entry first so a bad index leaves nothing half-written
            word_data = self.catalog.get_word(dictionary_id, index)
            word_data.pop('dictionary', None)

        dictionary_progress.update_progress(is_correct, response_time, now)

        word_progress = self._load_word_progress(user_id, dictionary_id, word)
        if word_progress is None:
            difficulty = user_difficulty if user_difficulty is not None else NEUTRAL_DIFFICULTY
            word_progress = WordProgress(user_id, dictionary_id, word, index, difficulty, now)
        word_progress.record_attempt(is_correct, response_time, user_difficulty, now)

        wrong_word = None
        if not is_correct:
            translations = word_data.get('trans') or []
            correct_answer = translations[0] if translations else ''
            existing = self.storage.load_wrong_word(user_id, dictionary_id, word)
            if existing:
                wrong_word = WrongWord.from_dict(existing)
                wrong_word.add_error(user_answer, correct_answer, 'meaning', now=now)
            else:
                wrong_word = WrongWord.create(user_id, dictionary_id, word, word_data,
                                              user_answer, correct_answer, 'meaning', now=now)

        dictionary_progress.advance_position(now)

        self.storage.save_word_progress(word_progress.to_dict())
        if wrong_word:
            self.storage.save_wrong_word(wrong_word.to_dict())
        self.storage.save_user_dictionary(dictionary_progress.to_dict())

        next_word = None
        if dictionary_progress.current_position < dictionary_progress.total_words:
            try:
                next_word = self.catalog.get_word(dictionary_id, dictionary_progress.current_position)
            except WordIndexError:
                next_word = None

        result = {
            'correct': is_correct,
            'word_progress': word_progress.summary(now),
            'dictionary_progress': dictionary_progress.summary(),
            'wrong_word': wrong_word.summary(now) if wrong_word else None,
            'next_word': next_word,
            'duplicate': False
        }
        if submission_id:
            self.storage.save_submission(user_id, submission_id, result)
        return result

    def dictionary_progress(self, user_id: str, dictionary_id: str) -> dict:
        """Dictionary totals plus word-level statistics.

        Users who never started the dictionary get a zeroed record.
        """
        dictionary = self.catalog.get_dictionary(dictionary_id)
        progress = self._load_user_dictionary(user_id, dictionary_id)
        if progress is None:
            progress = UserDictionary(user_id, dictionary_id, dictionary.total_words)

        words = self._word_progress_list(user_id, dictionary_id)
        unresolved = self._wrong_words(user_id, dictionary_id, include_resolved=False)
        average_mastery = sum(w.mastery_level for w in words) / len(words) if words else 0

        return {
            'dictionary': dictionary.to_dict(),
            'overall': progress.summary(),
            'word_level_stats': {
                'words_attempted': len(words),
                'mastered_words': sum(1 for w in words if w.is_mastered),
                'average_mastery_level': round2(average_mastery),
                'wrong_words_count': len(unresolved)
            }
        }

    def overview(self, user_id: str) -> dict:
        """Every catalog dictionary with the user's progress and overall totals."""
        progress_map = {}
        for row in self.storage.list_user_dictionaries(user_id):
            progress = UserDictionary.from_dict(row)
            progress_map[progress.dictionary_id] = progress

        dictionaries = self.catalog.list_dictionaries()
        started = list(progress_map.values())
        correct = sum(p.correct_answers for p in started)
        wrong = sum(p.wrong_answers for p in started)

        summary = {
            'total_dictionaries': len(dictionaries),
            'started_dictionaries': len(started),
            'completed_dictionaries': sum(1 for p in started if p.status == 'completed'),
            'in_progress_dictionaries': sum(1 for p in started if p.status == 'in_progress'),
            'total_words_learned': sum(p.completed_words for p in started),
            'total_correct_answers': correct,
            'total_wrong_answers': wrong,
            'overall_accuracy': round2(correct / (correct + wrong) * 100) if correct + wrong else 0
        }

        return {
            'summary': summary,
            'dictionaries': [
                {
                    'dictionary': d.to_dict(),
                    'progress': progress_map[d.id].summary() if d.id in progress_map else None
                }
                for d in dictionaries
            ]
        }

    def dashboard_stats(self, now: datetime = None) -> dict:
        """Totals across every user, for the admin dashboard."""
        users = self.storage.list_users()
        user_dictionaries = word_progress = mastered = wrong_words = unresolved = 0
        for user_id in users:
            user_dictionaries += len(self.storage.list_user_dictionaries(user_id))
            words = self._word_progress_list(user_id)
            word_progress += len(words)
            mastered += sum(1 for w in words if w.is_mastered)
            records = self._wrong_words(user_id, include_resolved=True)
            wrong_words += len(records)
            unresolved += sum(1 for w in records if not w.is_resolved)

        return {
            'total_users': len(users),
            'total_dictionaries': len(self.catalog.list_dictionaries()),
            'total_user_dictionaries': user_dictionaries,
            'total_word_progress': word_progress,
            'mastered_words': mastered,
            'total_wrong_words': wrong_words,
            'unresolved_wrong_words': unresolved,
            'last_updated': to_iso(now or utc_now())
        }

    def update_progress(self, user_id: str, dictionary_id: str, current_position: int = None,
                        settings: dict = None, now: datetime = None) -> UserDictionary:
        """Move the position and/or change settings. Raises ValueError for a bad position."""
        progress = self._require_user_dictionary(user_id, dictionary_id)
        if current_position is not None:
            progress.set_position(current_position, now)
        if settings:
            progress.update_settings(settings)
        progress.last_accessed = now or utc_now()
        self.storage.save_user_dictionary(progress.to_dict())
        return progress

    def pause_dictionary(self, user_id: str, dictionary_id: str, now: datetime = None) -> UserDictionary:
        progress = self._require_user_dictionary(user_id, dictionary_id)
        if progress.pause(now):
            self.storage.save_user_dictionary(progress.to_dict())
        return progress

    def resume_dictionary(self, user_id: str, dictionary_id: str, now: datetime = None) -> UserDictionary:
        progress = self._require_user_dictionary(user_id, dictionary_id)
        if progress.resume(now):
            self.storage.save_user_dictionary(progress.to_dict())
        return progress

    def reset_dictionary(self, user_id: str, dictionary_id: str, now: datetime = None) -> UserDictionary:
        progress = self._require_user_dictionary(user_id, dictionary_id)
        progress.reset_progress(now)
        self.storage.save_user_dictionary(progress.to_dict())
        return progress

    # Word progress

    def reset_word(self, user_id: str, dictionary_id: str, word: str, now: datetime = None) -> WordProgress:
        progress = self._require_word_progress(user_id, dictionary_id, word)
        progress.reset_progress(now)
        self.storage.save_word_progress(progress.to_dict())
        return progress

    def master_word(self, user_id: str, dictionary_id: str, word: str, now: datetime = None) -> WordProgress:
        progress = self._require_word_progress(user_id, dictionary_id, word)
        progress.mark_as_mastered(now)
        self.storage.save_word_progress(progress.to_dict())
        return progress

    def due_words(self, user_id: str, dictionary_id: str = None, now: datetime = None) -> list[WordProgress]:
        """Unmastered words whose next review has passed, earliest first."""
        now = now or utc_now()
        due = [w for w in self._word_progress_list(user_id, dictionary_id)
               if not w.is_mastered and w.is_due_for_review(now)]
        return sorted(due, key=lambda w: w.next_review)

    def mastered_words(self, user_id: str, dictionary_id: str = None) -> list[WordProgress]:
        return [w for w in self._word_progress_list(user_id, dictionary_id) if w.is_mastered]

    def struggling_words(self, user_id: str, dictionary_id: str = None) -> list[WordProgress]:
        return [w for w in self._word_progress_list(user_id, dictionary_id)
                if w.mastery_level < 2 and w.total_attempts > 0 and not w.is_mastered]

    # Wrong words

    def wrong_words(self, user_id: str, dictionary_id: str = None, include_resolved: bool = False,
                    sort_by: str = 'urgency', limit: int = DEFAULT_WRONG_WORDS_LIMIT,
                    now: datetime = None) -> dict:
        now = now or utc_now()
        if dictionary_id:
            self.catalog.get_dictionary(dictionary_id)
        records = self._wrong_words(user_id, dictionary_id, include_resolved)
        ordered = sort_wrong_words(records, sort_by, now)[:limit]
        return {
            'summary': summarize(records, now),
            'wrong_words': [record.summary(now) for record in ordered]
        }

    def review_queue(self, user_id: str, limit: int = DEFAULT_REVIEW_QUEUE_LIMIT,
                     now: datetime = None) -> list[dict]:
        now = now or utc_now()
        records = self._wrong_words(user_id, include_resolved=False)
        return [review_queue_entry(record, now) for record in rank_by_urgency(records, limit, now)]

    def high_priority_words(self, user_id: str, min_priority: int = HIGH_PRIORITY,
                            limit: int = 20) -> list[WrongWord]:
        return high_priority(self._wrong_words(user_id, include_resolved=False), min_priority, limit)

    def wrong_word_analytics(self, user_id: str, timeframe_days: int = 30, now: datetime = None) -> dict:
        return analytics(self._wrong_words(user_id), timeframe_days, now)

    def review_wrong_word(self, user_id: str, wrong_word_id: str, was_successful: bool,
                          review_method: str = 'study', response_time: float = 0,
                          confidence_level: int = 3, now: datetime = None) -> WrongWord:
        """Record a review; a success also counts as a correct attempt on the word."""
        now = now or utc_now()
        record = self._require_wrong_word(user_id, wrong_word_id)
        record.add_review(was_successful, review_method, response_time, confidence_level, now)

        if was_successful:
            word_progress = self._load_word_progress(user_id, record.dictionary_id, record.word)
            if word_progress:
                word_progress.record_attempt(True, response_time, now=now)
                self.storage.save_word_progress(word_progress.to_dict())

        self.storage.save_wrong_word(record.to_dict())
        return record

    def mark_resolved(self, user_id: str, wrong_word_id: str, now: datetime = None) -> WrongWord:
        record = self._require_wrong_word(user_id, wrong_word_id)
        record.mark_as_resolved(now)
        self.storage.save_wrong_word(record.to_dict())
        return record

    def mark_unresolved(self, user_id: str, wrong_word_id: str) -> WrongWord:
        record = self._require_wrong_word(user_id, wrong_word_id)
        record.mark_as_unresolved()
        self.storage.save_wrong_word(record.to_dict())
        return record

    def update_notes(self, user_id: str, wrong_word_id: str, **notes) -> WrongWord:
        record = self._require_wrong_word(user_id, wrong_word_id)
        record.update_learning_notes(**notes)
        self.storage.save_wrong_word(record.to_dict())
        return record

    def delete_wrong_word(self, user_id: str, wrong_word_id: str) -> WrongWord:
        record = self._require_wrong_word(user_id, wrong_word_id)
        self.storage.delete_wrong_word(user_id, wrong_word_id)
        return record

    def generate_hints(self, user_id: str, wrong_word_id: str,
                       provider: AIProvider) -> tuple[WrongWord, list, int]:
        """Ask the provider for hints and attach them to the wrong word.
        Returns (record, new_hints, generation_time_ms)."""
        record = self._require_wrong_word(user_id, wrong_word_id)
        translations = record.word_data.get('trans') or []
        hints, generation_ms = provider.generate_hints(record.word, translations, record.error_details)
        for hint in hints:
            record.add_hint(hint['hint_type'], hint['hint_content'])
        if hints:
            self.storage.save_wrong_word(record.to_dict())
        return record, hints, generation_ms

    def rate_hint(self, user_id: str, wrong_word_id: str, index: int, rating: int) -> WrongWord:
        record = self._require_wrong_word(user_id, wrong_word_id)
        if not record.update_hint_effectiveness(index, rating):
            raise HintNotFoundError(f"Hint {index} not found")
        self.storage.save_wrong_word(record.to_dict())
        return record
