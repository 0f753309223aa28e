"""Domain models for vocabin application."""

import math
import uuid
from datetime import datetime, timedelta

from .config import (
    MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL, MASTERY_THRESHOLDS, MASTERY_DECAY_WRONG_STREAK,
    DEFAULT_INTERVAL_DAYS, SECOND_INTERVAL_DAYS, DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR,
    EASE_STEP, NEUTRAL_DIFFICULTY, MASTERED_REVIEW_DAYS,
    PRIORITY_THRESHOLDS, MIN_PRIORITY,
    RESOLUTION_WINDOW_SIZE, RESOLUTION_MIN_REVIEWS, RESOLUTION_SUCCESS_RATE,
    URGENCY_PRIORITY_WEIGHT, URGENCY_ERROR_WEIGHT, URGENCY_RECENCY_DAYS, URGENCY_RECENCY_WEIGHT,
    DEFAULT_DAILY_GOAL, RECENT_ERRORS_SHOWN, ERROR_TYPES
)
from .utils import utc_now, to_iso, from_iso, round_half_up, round2

SECONDS_PER_DAY = 86400


def _fresh_metrics() -> dict:
    return {
        'average_response_time': 0,
        'accuracy_rate': 0,
        'consecutive_correct': 0,
        'consecutive_wrong': 0,
        'last_streak': 0
    }


def _fresh_schedule() -> dict:
    return {
        'interval': DEFAULT_INTERVAL_DAYS,
        'ease_factor': DEFAULT_EASE_FACTOR,
        'repetition': 0
    }


class WordProgress:
    """Learning state of one word for one user in one dictionary.

    Mutated once per answer by record_attempt(), which updates the counters,
    the rolling performance metrics, the spaced repetition schedule and the
    mastery level in that order.
    """

    def __init__(self, user_id: str, dictionary_id: str, word: str, word_index: int = 0,
                 difficulty_rating: int = NEUTRAL_DIFFICULTY, now: datetime = None):
        now = now or utc_now()
        self.user_id = user_id
        self.dictionary_id = dictionary_id
        self.word = word
        self.word_index = word_index
        self.correct_attempts = 0
        self.wrong_attempts = 0
        self.mastery_level = MIN_MASTERY_LEVEL
        self.is_mastered = False
        self.difficulty_rating = difficulty_rating
        self.spaced_repetition = _fresh_schedule()
        self.next_review = now
        self.last_reviewed = now
        self.first_learned = now
        self.learning_history = []  # [{attempt_date, was_correct, response_time, difficulty_after}]
        self.performance_metrics = _fresh_metrics()

    @property
    def total_attempts(self) -> int:
        return self.correct_attempts + self.wrong_attempts

    @property
    def accuracy_percentage(self) -> float:
        if self.total_attempts == 0:
            return 0
        return round2(self.correct_attempts / self.total_attempts * 100)

    @property
    def learning_status(self) -> str:
        if self.is_mastered:
            return 'Mastered'
        if self.mastery_level >= 4:
            return 'Nearly Mastered'
        if self.mastery_level >= 2:
            return 'Learning'
        if self.total_attempts == 0:
            return 'New'
        return 'Struggling'

    def days_until_review(self, now: datetime = None) -> int:
        now = now or utc_now()
        return math.ceil((self.next_review - now).total_seconds() / SECONDS_PER_DAY)

    def is_due_for_review(self, now: datetime = None) -> bool:
        now = now or utc_now()
        return now >= self.next_review

    def record_attempt(self, is_correct: bool, response_time: float = 0,
                       user_difficulty: int | None = None, now: datetime = None) -> 'WordProgress':
        """Apply one graded answer.

        Args:
            is_correct: Whether the answer was correct
            response_time: Time taken to answer, in milliseconds (>= 0)
            user_difficulty: Optional self-reported difficulty (1-5)
            now: Reference time (defaults to current UTC time)
        """
        now = now or utc_now()
        metrics = self.performance_metrics

        if is_correct:
            self.correct_attempts += 1
            metrics['consecutive_correct'] += 1
            metrics['consecutive_wrong'] = 0
        else:
            self.wrong_attempts += 1
            metrics['consecutive_wrong'] += 1
            metrics['consecutive_correct'] = 0

        self.learning_history.append({
            'attempt_date': to_iso(now),
            'was_correct': is_correct,
            'response_time': response_time,
            'difficulty_after': user_difficulty if user_difficulty is not None else self.difficulty_rating
        })

        self._update_performance_metrics()
        self._update_spaced_repetition(is_correct, user_difficulty, now)
        self._update_mastery_level()
        self.last_reviewed = now
        return self

    def _update_performance_metrics(self) -> None:
        metrics = self.performance_metrics
        total = self.total_attempts
        if total > 0:
            metrics['accuracy_rate'] = self.correct_attempts / total * 100
        if self.learning_history:
            total_time = sum(entry['response_time'] for entry in self.learning_history)
            metrics['average_response_time'] = total_time / len(self.learning_history)
        metrics['last_streak'] = max(metrics['consecutive_correct'], metrics['consecutive_wrong'])

    def _update_spaced_repetition(self, is_correct: bool, user_difficulty: int | None,
                                  now: datetime) -> None:
        sr = self.spaced_repetition
        if is_correct:
            if sr['repetition'] == 0:
                sr['interval'] = DEFAULT_INTERVAL_DAYS
            elif sr['repetition'] == 1:
                sr['interval'] = SECOND_INTERVAL_DAYS
            else:
                sr['interval'] = round_half_up(sr['interval'] * sr['ease_factor'])
            sr['repetition'] += 1
        else:
            sr['repetition'] = 0
            sr['interval'] = DEFAULT_INTERVAL_DAYS

        if user_difficulty is not None:
            adjustment = (NEUTRAL_DIFFICULTY - user_difficulty) * EASE_STEP
            sr['ease_factor'] = max(MIN_EASE_FACTOR, sr['ease_factor'] + adjustment)

        self.next_review = now + timedelta(days=sr['interval'])

    def _update_mastery_level(self) -> None:
        metrics = self.performance_metrics
        accuracy = metrics['accuracy_rate']
        consecutive_correct = metrics['consecutive_correct']
        total = self.total_attempts

        for min_total, min_accuracy, min_streak, level in MASTERY_THRESHOLDS:
            if total >= min_total and accuracy >= min_accuracy and consecutive_correct >= min_streak:
                # Level only moves down through the decay rule below
                self.mastery_level = max(self.mastery_level, level)
                if level == MAX_MASTERY_LEVEL:
                    self.is_mastered = True
                break

        if metrics['consecutive_wrong'] >= MASTERY_DECAY_WRONG_STREAK:
            self.mastery_level = max(MIN_MASTERY_LEVEL, self.mastery_level - 1)
            self.is_mastered = False

    def reset_progress(self, now: datetime = None) -> 'WordProgress':
        """Clear all learning progress so the word is learned from scratch."""
        now = now or utc_now()
        self.correct_attempts = 0
        self.wrong_attempts = 0
        self.mastery_level = MIN_MASTERY_LEVEL
        self.is_mastered = False
        self.spaced_repetition = _fresh_schedule()
        self.next_review = now
        self.learning_history = []
        self.performance_metrics = _fresh_metrics()
        return self

    def mark_as_mastered(self, now: datetime = None) -> 'WordProgress':
        """Force the word to mastered and push its next review out."""
        now = now or utc_now()
        self.mastery_level = MAX_MASTERY_LEVEL
        self.is_mastered = True
        self.next_review = now + timedelta(days=MASTERED_REVIEW_DAYS)
        return self

    def summary(self, now: datetime = None) -> dict:
        """Compact view used in API responses."""
        return {
            'word': self.word,
            'word_index': self.word_index,
            'correct_attempts': self.correct_attempts,
            'wrong_attempts': self.wrong_attempts,
            'total_attempts': self.total_attempts,
            'accuracy_percentage': self.accuracy_percentage,
            'mastery_level': self.mastery_level,
            'is_mastered': self.is_mastered,
            'learning_status': self.learning_status,
            'next_review': to_iso(self.next_review),
            'days_until_review': self.days_until_review(now),
            'interval': self.spaced_repetition['interval']
        }

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'dictionary_id': self.dictionary_id,
            'word': self.word,
            'word_index': self.word_index,
            'correct_attempts': self.correct_attempts,
            'wrong_attempts': self.wrong_attempts,
            'mastery_level': self.mastery_level,
            'is_mastered': self.is_mastered,
            'difficulty_rating': self.difficulty_rating,
            'spaced_repetition': dict(self.spaced_repetition),
            'next_review': to_iso(self.next_review),
            'last_reviewed': to_iso(self.last_reviewed),
            'first_learned': to_iso(self.first_learned),
            'learning_history': [dict(entry) for entry in self.learning_history],
            'performance_metrics': dict(self.performance_metrics)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordProgress':
        progress = cls(data['user_id'], data['dictionary_id'], data['word'],
                       data.get('word_index', 0),
                       data.get('difficulty_rating', NEUTRAL_DIFFICULTY))
        progress.correct_attempts = data.get('correct_attempts', 0)
        progress.wrong_attempts = data.get('wrong_attempts', 0)
        progress.mastery_level = data.get('mastery_level', MIN_MASTERY_LEVEL)
        progress.is_mastered = data.get('is_mastered', False)
        progress.spaced_repetition = {**_fresh_schedule(), **data.get('spaced_repetition', {})}
        progress.next_review = from_iso(data.get('next_review')) or progress.next_review
        progress.last_reviewed = from_iso(data.get('last_reviewed')) or progress.last_reviewed
        progress.first_learned = from_iso(data.get('first_learned')) or progress.first_learned
        progress.learning_history = data.get('learning_history', [])
        progress.performance_metrics = {**_fresh_metrics(), **data.get('performance_metrics', {})}
        return progress


class WrongWord:
    """Review record for a word the user has answered incorrectly.

    Created on the first wrong answer. Further mistakes raise the review
    priority and reopen a resolved record; successful reviews eventually
    resolve it again.
    """

    NOTE_FIELDS = ('user_notes', 'mnemonic', 'difficulty_reason', 'personal_example')

    def __init__(self, user_id: str, dictionary_id: str, word: str, word_data: dict = None,
                 now: datetime = None, wrong_word_id: str = None):
        now = now or utc_now()
        self.id = wrong_word_id or uuid.uuid4().hex
        self.user_id = user_id
        self.dictionary_id = dictionary_id
        self.word = word
        self.word_data = word_data or {}
        self.error_count = 1
        self.last_wrong_date = now
        self.first_wrong_date = now
        self.review_priority = MIN_PRIORITY
        self.is_resolved = False
        self.resolved_date = None
        self.error_details = []
        self.review_history = []
        self.learning_notes = {field: '' for field in self.NOTE_FIELDS}
        self.auto_generated_hints = []

    @classmethod
    def create(cls, user_id: str, dictionary_id: str, word: str, word_data: dict = None,
               user_answer: str = '', correct_answer: str = '', error_type: str = 'meaning',
               context: str = '', now: datetime = None) -> 'WrongWord':
        """Create the record for a first mistake (error_count == 1)."""
        now = now or utc_now()
        record = cls(user_id, dictionary_id, word, word_data, now)
        record._append_error(user_answer, correct_answer, error_type, context, now)
        return record

    # Derived values

    def days_since_last_error(self, now: datetime = None) -> int:
        now = now or utc_now()
        return math.floor((now - self.last_wrong_date).total_seconds() / SECONDS_PER_DAY)

    @property
    def total_review_attempts(self) -> int:
        return len(self.review_history)

    @property
    def successful_review_rate(self) -> float:
        if not self.review_history:
            return 0
        successful = sum(1 for review in self.review_history if review['was_successful'])
        return round2(successful / len(self.review_history) * 100)

    def urgency_score(self, now: datetime = None) -> float:
        """Higher means the word should be reviewed sooner. Never negative."""
        recency = max(0, URGENCY_RECENCY_DAYS - self.days_since_last_error(now))
        score = (self.review_priority * URGENCY_PRIORITY_WEIGHT
                 + self.error_count * URGENCY_ERROR_WEIGHT
                 + recency * URGENCY_RECENCY_WEIGHT
                 - self.successful_review_rate)
        return max(0, score)

    @property
    def review_status(self) -> str:
        if self.is_resolved:
            return 'Resolved'
        rate = self.successful_review_rate
        if rate >= 80:
            return 'Nearly Resolved'
        if self.total_review_attempts == 0:
            return 'Needs Review'
        if rate >= 50:
            return 'Improving'
        return 'Struggling'

    # Transitions

    def _append_error(self, user_answer: str, correct_answer: str, error_type: str,
                      context: str, now: datetime) -> None:
        self.error_details.append({
            'error_date': to_iso(now),
            'user_answer': (user_answer or '').strip(),
            'correct_answer': (correct_answer or '').strip(),
            'error_type': error_type if error_type in ERROR_TYPES else 'other',
            'context': (context or '').strip()
        })

    def add_error(self, user_answer: str = '', correct_answer: str = '', error_type: str = 'meaning',
                  context: str = '', now: datetime = None) -> 'WrongWord':
        """Record another mistake on this word."""
        now = now or utc_now()
        self.error_count += 1
        self.last_wrong_date = now

        for min_errors, priority in PRIORITY_THRESHOLDS:
            if self.error_count >= min_errors:
                self.review_priority = max(self.review_priority, priority)
                break

        self._append_error(user_answer, correct_answer, error_type, context, now)

        if self.is_resolved:
            self.is_resolved = False
            self.resolved_date = None
        return self

    def add_review(self, was_successful: bool, review_method: str = 'study', response_time: float = 0,
                   confidence_level: int = 3, now: datetime = None) -> 'WrongWord':
        """Record a review attempt and resolve the word if recent reviews went well."""
        now = now or utc_now()
        self.review_history.append({
            'review_date': to_iso(now),
            'was_successful': was_successful,
            'review_method': review_method,
            'response_time': response_time,
            'confidence_level': confidence_level
        })
        self._check_resolution(now)
        return self

    def _check_resolution(self, now: datetime) -> None:
        recent = self.review_history[-RESOLUTION_WINDOW_SIZE:]
        if len(recent) < RESOLUTION_MIN_REVIEWS:
            return
        successful = sum(1 for review in recent if review['was_successful'])
        if successful / len(recent) >= RESOLUTION_SUCCESS_RATE:
            self.is_resolved = True
            self.resolved_date = now

    def mark_as_resolved(self, now: datetime = None) -> 'WrongWord':
        self.is_resolved = True
        self.resolved_date = now or utc_now()
        return self

    def mark_as_unresolved(self) -> 'WrongWord':
        self.is_resolved = False
        self.resolved_date = None
        return self

    def update_learning_notes(self, **notes) -> 'WrongWord':
        """Merge note fields; unknown keys and None values are ignored."""
        for key, value in notes.items():
            if key in self.NOTE_FIELDS and value is not None:
                self.learning_notes[key] = value.strip()
        return self

    def add_hint(self, hint_type: str, hint_content: str, effectiveness_rating: int = 3) -> 'WrongWord':
        self.auto_generated_hints.append({
            'hint_type': hint_type,
            'hint_content': hint_content,
            'effectiveness_rating': effectiveness_rating
        })
        return self

    def update_hint_effectiveness(self, index: int, rating: int) -> bool:
        """Rate a hint. Returns False if there is no hint at that index."""
        if 0 <= index < len(self.auto_generated_hints):
            self.auto_generated_hints[index]['effectiveness_rating'] = rating
            return True
        return False

    def review_queue_entry(self, now: datetime = None) -> dict:
        """Read-only projection used by the review queue."""
        return {
            'id': self.id,
            'dictionary_id': self.dictionary_id,
            'word': self.word,
            'urgency_score': self.urgency_score(now),
            'review_status': self.review_status,
            'successful_review_rate': self.successful_review_rate
        }

    def summary(self, now: datetime = None) -> dict:
        return {
            'id': self.id,
            'dictionary_id': self.dictionary_id,
            'word': self.word,
            'word_data': self.word_data,
            'error_count': self.error_count,
            'review_priority': self.review_priority,
            'last_wrong_date': to_iso(self.last_wrong_date),
            'first_wrong_date': to_iso(self.first_wrong_date),
            'is_resolved': self.is_resolved,
            'resolved_date': to_iso(self.resolved_date),
            'days_since_last_error': self.days_since_last_error(now),
            'urgency_score': self.urgency_score(now),
            'review_status': self.review_status,
            'successful_review_rate': self.successful_review_rate,
            'total_review_attempts': self.total_review_attempts,
            'learning_notes': dict(self.learning_notes),
            'recent_errors': self.error_details[-RECENT_ERRORS_SHOWN:]
        }

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'dictionary_id': self.dictionary_id,
            'word': self.word,
            'word_data': self.word_data,
            'error_count': self.error_count,
            'last_wrong_date': to_iso(self.last_wrong_date),
            'first_wrong_date': to_iso(self.first_wrong_date),
            'review_priority': self.review_priority,
            'is_resolved': self.is_resolved,
            'resolved_date': to_iso(self.resolved_date),
            'error_details': [dict(entry) for entry in self.error_details],
            'review_history': [dict(entry) for entry in self.review_history],
            'learning_notes': dict(self.learning_notes),
            'auto_generated_hints': [dict(hint) for hint in self.auto_generated_hints]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WrongWord':
        record = cls(data['user_id'], data['dictionary_id'], data['word'],
                     data.get('word_data'), wrong_word_id=data.get('id'))
        record.error_count = data.get('error_count', 1)
        record.last_wrong_date = from_iso(data.get('last_wrong_date')) or record.last_wrong_date
        record.first_wrong_date = from_iso(data.get('first_wrong_date')) or record.last_wrong_date
        record.review_priority = data.get('review_priority', MIN_PRIORITY)
        record.is_resolved = data.get('is_resolved', False)
        record.resolved_date = from_iso(data.get('resolved_date'))
        record.error_details = data.get('error_details', [])
        record.review_history = data.get('review_history', [])
        record.learning_notes = {**record.learning_notes, **data.get('learning_notes', {})}
        record.auto_generated_hints = data.get('auto_generated_hints', [])
        return record


class UserDictionary:
    """A user's position and running totals within one dictionary."""

    def __init__(self, user_id: str, dictionary_id: str, total_words: int, now: datetime = None):
        now = now or utc_now()
        self.user_id = user_id
        self.dictionary_id = dictionary_id
        self.total_words = total_words
        self.completed_words = 0
        self.correct_answers = 0
        self.wrong_answers = 0
        self.current_position = 0
        self.status = 'not_started'
        self.last_accessed = now
        self.started_at = None
        self.completed_at = None
        self.settings = {
            'daily_goal': DEFAULT_DAILY_GOAL,
            'review_mode': False,
            'shuffle_words': False,
            'auto_play_audio': True
        }
        self.session_stats = {
            'total_study_time': 0,  # seconds
            'average_time_per_word': 0,
            'current_streak': 0,
            'best_streak': 0,
            'last_session_date': None
        }

    @property
    def total_attempts(self) -> int:
        return self.correct_answers + self.wrong_answers

    @property
    def accuracy_rate(self) -> float:
        if self.total_attempts == 0:
            return 0
        return round2(self.correct_answers / self.total_attempts * 100)

    @property
    def completion_percentage(self) -> float:
        if self.total_words == 0:
            return 0
        return round2(self.completed_words / self.total_words * 100)

    @property
    def progress_status(self) -> str:
        percentage = self.completion_percentage
        if percentage == 0:
            return 'Not Started'
        if percentage < 25:
            return 'Just Started'
        if percentage < 50:
            return 'Making Progress'
        if percentage < 75:
            return 'Halfway There'
        if percentage < 100:
            return 'Almost Done'
        return 'Completed'

    def _clamp(self) -> None:
        self.completed_words = min(self.completed_words, self.total_words)
        self.current_position = min(self.current_position, self.total_words)

    def start(self, now: datetime = None) -> 'UserDictionary':
        now = now or utc_now()
        if self.status in ('not_started', 'paused'):
            if self.started_at is None:
                self.started_at = now
            self.status = 'in_progress'
        self.last_accessed = now
        return self

    def update_progress(self, is_correct: bool, time_spent_ms: float = 0,
                        now: datetime = None) -> 'UserDictionary':
        """Count one answer towards the dictionary totals."""
        now = now or utc_now()
        stats = self.session_stats
        if is_correct:
            self.correct_answers += 1
            stats['current_streak'] += 1
            stats['best_streak'] = max(stats['best_streak'], stats['current_streak'])
        else:
            self.wrong_answers += 1
            stats['current_streak'] = 0

        stats['total_study_time'] += time_spent_ms / 1000
        stats['last_session_date'] = to_iso(now)
        if self.total_attempts > 0:
            stats['average_time_per_word'] = stats['total_study_time'] / self.total_attempts

        self.last_accessed = now
        if self.status == 'not_started':
            self.status = 'in_progress'
            self.started_at = now
        return self

    def advance_position(self, now: datetime = None) -> 'UserDictionary':
        now = now or utc_now()
        self.current_position += 1
        self.completed_words = max(self.completed_words, self.current_position)
        if self.completed_words >= self.total_words:
            self.status = 'completed'
            self.completed_at = now
        self.last_accessed = now
        self._clamp()
        return self

    def set_position(self, position: int, now: datetime = None) -> 'UserDictionary':
        """Jump to a position. Raises ValueError outside 0..total_words."""
        if position < 0 or position > self.total_words:
            raise ValueError(f"Position {position} out of range 0..{self.total_words}")
        self.current_position = position
        self.completed_words = max(self.completed_words, position)
        self.last_accessed = now or utc_now()
        self._clamp()
        return self

    def update_settings(self, settings: dict) -> 'UserDictionary':
        for key, value in settings.items():
            if key in self.settings and value is not None:
                self.settings[key] = value
        return self

    def reset_progress(self, now: datetime = None) -> 'UserDictionary':
        self.completed_words = 0
        self.correct_answers = 0
        self.wrong_answers = 0
        self.current_position = 0
        self.status = 'not_started'
        self.started_at = None
        self.completed_at = None
        self.session_stats['current_streak'] = 0
        self.last_accessed = now or utc_now()
        return self

    def pause(self, now: datetime = None) -> bool:
        if self.status != 'in_progress':
            return False
        self.status = 'paused'
        self.last_accessed = now or utc_now()
        return True

    def resume(self, now: datetime = None) -> bool:
        if self.status != 'paused':
            return False
        self.status = 'in_progress'
        self.last_accessed = now or utc_now()
        return True

    def summary(self) -> dict:
        return {
            'dictionary_id': self.dictionary_id,
            'status': self.status,
            'current_position': self.current_position,
            'total_words': self.total_words,
            'completed_words': self.completed_words,
            'completion_percentage': self.completion_percentage,
            'progress_status': self.progress_status,
            'accuracy_rate': self.accuracy_rate,
            'correct_answers': self.correct_answers,
            'wrong_answers': self.wrong_answers,
            'started_at': to_iso(self.started_at),
            'completed_at': to_iso(self.completed_at),
            'last_accessed': to_iso(self.last_accessed),
            'settings': dict(self.settings),
            'session_stats': dict(self.session_stats)
        }

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'dictionary_id': self.dictionary_id,
            'total_words': self.total_words,
            'completed_words': self.completed_words,
            'correct_answers': self.correct_answers,
            'wrong_answers': self.wrong_answers,
            'current_position': self.current_position,
            'status': self.status,
            'last_accessed': to_iso(self.last_accessed),
            'started_at': to_iso(self.started_at),
            'completed_at': to_iso(self.completed_at),
            'settings': dict(self.settings),
            'session_stats': dict(self.session_stats)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserDictionary':
        progress = cls(data['user_id'], data['dictionary_id'], data.get('total_words', 0))
        progress.completed_words = data.get('completed_words', 0)
        progress.correct_answers = data.get('correct_answers', 0)
        progress.wrong_answers = data.get('wrong_answers', 0)
        progress.current_position = data.get('current_position', 0)
        progress.status = data.get('status', 'not_started')
        progress.last_accessed = from_iso(data.get('last_accessed')) or progress.last_accessed
        progress.started_at = from_iso(data.get('started_at'))
        progress.completed_at = from_iso(data.get('completed_at'))
        progress.settings = {**progress.settings, **data.get('settings', {})}
        progress.session_stats = {**progress.session_stats, **data.get('session_stats', {})}
        progress._clamp()
        return progress
