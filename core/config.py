"""Configuration constants for vocabin application."""

# Mastery levels
MIN_MASTERY_LEVEL = 0
MAX_MASTERY_LEVEL = 5

# Mastery thresholds, checked in order: (min attempts, min accuracy %, min consecutive correct, level)
MASTERY_THRESHOLDS = [
    (5, 90, 3, 5),
    (4, 80, 2, 4),
    (3, 70, 0, 3),
    (2, 50, 0, 2),
    (1, 0, 0, 1),
]
MASTERY_DECAY_WRONG_STREAK = 3  # Consecutive wrong answers that cost one level

# Spaced repetition (SM-2 style)
DEFAULT_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_STEP = 0.15              # Ease change per difficulty point away from 3
NEUTRAL_DIFFICULTY = 3
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
MASTERED_REVIEW_DAYS = 30     # Next review after a manual "mark as mastered"

# Wrong word review priority: (min error count, priority)
PRIORITY_THRESHOLDS = [
    (5, 5),
    (3, 4),
    (2, 3),
]
MIN_PRIORITY = 1
MAX_PRIORITY = 5
HIGH_PRIORITY = 4

# Wrong word resolution
RESOLUTION_WINDOW_SIZE = 5     # Number of recent reviews to consider
RESOLUTION_MIN_REVIEWS = 3     # Reviews needed before resolving
RESOLUTION_SUCCESS_RATE = 0.8  # Success rate needed within the window

# Urgency score weights
URGENCY_PRIORITY_WEIGHT = 20
URGENCY_ERROR_WEIGHT = 10
URGENCY_RECENCY_DAYS = 7
URGENCY_RECENCY_WEIGHT = 5

ERROR_TYPES = ['spelling', 'meaning', 'pronunciation', 'usage', 'other']
REVIEW_METHODS = ['study', 'quiz', 'spaced_repetition', 'manual_review']
HINT_TYPES = ['similar_words', 'etymology', 'usage_example', 'memory_technique']

# Dictionary catalog
DICTIONARY_CACHE_SIZE = 10     # Word lists kept in memory
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
SECONDS_PER_WORD = 30          # Used for study time estimates
VALIDATION_SAMPLE_SIZE = 10
DIFFICULTY_LEVELS = ['beginner', 'intermediate', 'advanced']
CATEGORIES = ['CET', 'IELTS', 'GRE', 'TOEFL', 'General', 'Other']
AUDIO_BASE_URL = 'https://dict.youdao.com/dictvoice'

# User dictionary defaults
DEFAULT_DAILY_GOAL = 20

# Listing limits
DEFAULT_WRONG_WORDS_LIMIT = 50
MAX_WRONG_WORDS_LIMIT = 100
DEFAULT_REVIEW_QUEUE_LIMIT = 10
RECENT_ERROR_DAYS = 7
RECENT_ERRORS_SHOWN = 3
SUBMISSION_HISTORY_SIZE = 200  # Remembered submission ids per user
