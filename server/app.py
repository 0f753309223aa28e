"""FastAPI server for vocabin application."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core.config import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DEFAULT_WRONG_WORDS_LIMIT, MAX_WRONG_WORDS_LIMIT,
    DEFAULT_REVIEW_QUEUE_LIMIT, HIGH_PRIORITY, MIN_PRIORITY, MAX_PRIORITY
)
from core.dictionary import DictionaryCatalog, DictionaryNotFoundError, WordIndexError
from core.interfaces import AIProvider, Storage
from core.learning import (
    LearningService, DictionaryCompletedError, ProgressNotFoundError, WrongWordNotFoundError,
    HintNotFoundError
)

logger = logging.getLogger(__name__)

# Paths
PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DICT_DIR = PROJECT_ROOT / "dicts"

ReviewMethod = Literal['study', 'quiz', 'spaced_repetition', 'manual_review']
SortOption = Literal['urgency', 'recent', 'priority', 'error_count', 'alphabetical']


# Pydantic models for API
class AnswerRequest(BaseModel):
    user_id: str = Field(min_length=1)
    dictionary_id: str = Field(min_length=1)
    word: str = Field(min_length=1)
    word_index: Optional[int] = Field(None, ge=0)
    is_correct: bool
    user_answer: str = ''
    response_time: float = Field(0, ge=0)  # ms
    user_difficulty: Optional[int] = Field(None, ge=1, le=5)
    submission_id: Optional[str] = None


class AnswerResponse(BaseModel):
    correct: bool
    word_progress: dict
    dictionary_progress: dict
    wrong_word: Optional[dict]
    next_word: Optional[dict]
    duplicate: bool


class SettingsUpdate(BaseModel):
    daily_goal: Optional[int] = Field(None, ge=1)
    review_mode: Optional[bool] = None
    shuffle_words: Optional[bool] = None
    auto_play_audio: Optional[bool] = None


class UpdateProgressRequest(BaseModel):
    user_id: str
    current_position: Optional[int] = Field(None, ge=0)
    settings: Optional[SettingsUpdate] = None


class WordActionRequest(BaseModel):
    user_id: str
    dictionary_id: str
    word: str


class ReviewRequest(BaseModel):
    user_id: str
    was_successful: bool
    review_method: ReviewMethod = 'study'
    response_time: float = Field(0, ge=0)
    confidence_level: int = Field(3, ge=1, le=5)


class NotesRequest(BaseModel):
    user_id: str
    user_notes: Optional[str] = Field(None, max_length=1000)
    mnemonic: Optional[str] = Field(None, max_length=500)
    difficulty_reason: Optional[str] = Field(None, max_length=500)
    personal_example: Optional[str] = Field(None, max_length=500)


class HintsRequest(BaseModel):
    user_id: str


class HintRatingRequest(BaseModel):
    user_id: str
    rating: int = Field(ge=1, le=5)


class ReviewQueueEntry(BaseModel):
    id: str
    dictionary_id: str
    word: str
    urgency_score: float
    review_status: str
    successful_review_rate: float


class HintsResponse(BaseModel):
    word: str
    hints: list[dict]
    total_hints: int
    generate_ms: int


# Dependencies
def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_catalog(request: Request) -> DictionaryCatalog:
    return request.app.state.catalog


def get_service(request: Request) -> LearningService:
    return LearningService(request.app.state.storage, request.app.state.catalog)


def get_hint_provider(request: Request) -> AIProvider | None:
    return request.app.state.hint_provider


def require_user(storage: Storage, user_id: str) -> None:
    if not storage.user_exists(user_id):
        raise HTTPException(status_code=404, detail=f"User not found: {user_id}")


def log_event(storage: Storage, event: str, user_id: str, **data) -> None:
    """Log an event when the storage backend keeps an event log."""
    if hasattr(storage, 'log_event'):
        storage.log_event(event, user_id, **data)


router = APIRouter()


@router.get("/")
async def root(catalog: DictionaryCatalog = Depends(get_catalog)):
    """Health check."""
    return {"name": "vocabin", "status": "ok", "dictionaries": len(catalog.list_dictionaries())}


# User Management Endpoints
@router.get("/api/users")
async def list_users(storage: Storage = Depends(get_storage)):
    """List all existing users."""
    return {"users": storage.list_users()}


@router.get("/api/users/{user_id}/exists")
async def check_user_exists(user_id: str, storage: Storage = Depends(get_storage)):
    """Check if a user exists."""
    return {"exists": storage.user_exists(user_id)}


@router.post("/api/users/{user_id}")
async def create_user(user_id: str, storage: Storage = Depends(get_storage)):
    """Create a new user. Returns error if user already exists."""
    if not storage.create_user(user_id):
        return {"success": False, "error": "User already exists"}
    log_event(storage, 'user.create', user_id)
    return {"success": True, "user_id": user_id}


@router.delete("/api/users/{user_id}")
async def delete_user(user_id: str, storage: Storage = Depends(get_storage)):
    """Delete a user and all of their progress."""
    if not storage.delete_user(user_id):
        raise HTTPException(status_code=404, detail=f"User not found: {user_id}")
    log_event(storage, 'user.delete', user_id)
    return {"success": True, "user_id": user_id}


# Dictionary Endpoints
@router.get("/api/dictionaries")
async def list_dictionaries(category: str = None, difficulty: str = None,
                            catalog: DictionaryCatalog = Depends(get_catalog)):
    """List active dictionaries, optionally filtered."""
    dictionaries = catalog.list_dictionaries(category, difficulty)
    return {
        "summary": catalog.summary(),
        "dictionaries": [d.to_dict() for d in dictionaries]
    }


@router.post("/api/dictionaries/reload")
async def reload_dictionaries(catalog: DictionaryCatalog = Depends(get_catalog)):
    """Rescan the dictionary directory."""
    loaded = catalog.load()
    return {
        "loaded": [d.id for d in loaded],
        "errors": catalog.errors,
        "summary": catalog.summary()
    }


@router.delete("/api/dictionaries/cache")
async def clear_dictionary_cache(dictionary_id: str = None,
                                 catalog: DictionaryCatalog = Depends(get_catalog)):
    """Drop cached word lists (all, or one dictionary)."""
    catalog.clear_cache(dictionary_id)
    return {"success": True, "cached": catalog.cached_ids()}


@router.get("/api/dictionaries/{dictionary_id}")
async def get_dictionary(dictionary_id: str, catalog: DictionaryCatalog = Depends(get_catalog)):
    return catalog.get_dictionary(dictionary_id).to_dict()


@router.get("/api/dictionaries/{dictionary_id}/stats")
async def get_dictionary_stats(dictionary_id: str, catalog: DictionaryCatalog = Depends(get_catalog)):
    return catalog.stats(dictionary_id)


@router.get("/api/dictionaries/{dictionary_id}/words")
async def get_dictionary_words(dictionary_id: str,
                               page: int = Query(1, ge=1),
                               limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                               start_index: Optional[int] = Query(None, ge=0),
                               catalog: DictionaryCatalog = Depends(get_catalog)):
    """Get a page of words."""
    return catalog.get_words(dictionary_id, page, limit, start_index)


@router.get("/api/dictionaries/{dictionary_id}/words/{index}")
async def get_dictionary_word(dictionary_id: str, index: int,
                              catalog: DictionaryCatalog = Depends(get_catalog)):
    return catalog.get_word(dictionary_id, index)


@router.get("/api/dictionaries/{dictionary_id}/search")
async def search_dictionary(dictionary_id: str,
                            q: str = Query(..., min_length=1),
                            limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
                            catalog: DictionaryCatalog = Depends(get_catalog)):
    """Search words by name or translation."""
    return catalog.search(dictionary_id, q, limit)


@router.get("/api/dictionaries/{dictionary_id}/random")
async def random_dictionary_words(dictionary_id: str,
                                  count: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
                                  catalog: DictionaryCatalog = Depends(get_catalog)):
    return catalog.random_words(dictionary_id, count)


@router.get("/api/dictionaries/{dictionary_id}/validate")
async def validate_dictionary(dictionary_id: str, catalog: DictionaryCatalog = Depends(get_catalog)):
    return catalog.validate(dictionary_id)


# Progress Endpoints
@router.get("/api/user/dictionaries")
async def get_user_dictionaries(user_id: str, storage: Storage = Depends(get_storage),
                                service: LearningService = Depends(get_service)):
    """All dictionaries with the user's progress in each."""
    require_user(storage, user_id)
    return service.overview(user_id)


@router.post("/api/user/dictionaries/{dictionary_id}/start")
async def start_dictionary(dictionary_id: str, user_id: str,
                           storage: Storage = Depends(get_storage),
                           service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    progress = service.start_dictionary(user_id, dictionary_id)
    log_event(storage, 'dictionary.start', user_id, dictionary_id=dictionary_id)
    return {"progress": progress.summary()}


@router.get("/api/user/dictionaries/{dictionary_id}/current-word")
async def get_current_word(dictionary_id: str, user_id: str,
                           storage: Storage = Depends(get_storage),
                           service: LearningService = Depends(get_service)):
    """The word at the user's position. Starts the dictionary if needed."""
    require_user(storage, user_id)
    try:
        return service.current_word(user_id, dictionary_id)
    except DictionaryCompletedError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/user/dictionaries/{dictionary_id}/progress")
async def get_dictionary_progress(dictionary_id: str, user_id: str,
                                  storage: Storage = Depends(get_storage),
                                  service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return service.dictionary_progress(user_id, dictionary_id)


@router.put("/api/user/dictionaries/{dictionary_id}/progress")
async def update_dictionary_progress(dictionary_id: str, request: UpdateProgressRequest,
                                     storage: Storage = Depends(get_storage),
                                     service: LearningService = Depends(get_service)):
    """Move the position and/or change settings."""
    require_user(storage, request.user_id)
    settings = request.settings.model_dump(exclude_none=True) if request.settings else None
    try:
        progress = service.update_progress(request.user_id, dictionary_id,
                                           request.current_position, settings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"progress": progress.summary()}


@router.post("/api/user/dictionaries/{dictionary_id}/pause")
async def pause_dictionary(dictionary_id: str, user_id: str,
                           storage: Storage = Depends(get_storage),
                           service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return {"progress": service.pause_dictionary(user_id, dictionary_id).summary()}


@router.post("/api/user/dictionaries/{dictionary_id}/resume")
async def resume_dictionary(dictionary_id: str, user_id: str,
                            storage: Storage = Depends(get_storage),
                            service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return {"progress": service.resume_dictionary(user_id, dictionary_id).summary()}


@router.post("/api/user/dictionaries/{dictionary_id}/reset")
async def reset_dictionary(dictionary_id: str, user_id: str,
                           storage: Storage = Depends(get_storage),
                           service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    progress = service.reset_dictionary(user_id, dictionary_id)
    log_event(storage, 'dictionary.reset', user_id, dictionary_id=dictionary_id)
    return {"progress": progress.summary()}


@router.post("/api/user/word-answer", response_model=AnswerResponse)
async def submit_word_answer(request: AnswerRequest,
                             storage: Storage = Depends(get_storage),
                             service: LearningService = Depends(get_service)):
    """Grade one answer and advance to the next word."""
    require_user(storage, request.user_id)
    result = service.submit_answer(
        request.user_id, request.dictionary_id, request.word, request.is_correct,
        word_index=request.word_index,
        user_answer=request.user_answer,
        response_time=request.response_time,
        user_difficulty=request.user_difficulty,
        submission_id=request.submission_id
    )
    if not result['duplicate']:
        log_event(storage, 'answer.submit', request.user_id,
                  dictionary_id=request.dictionary_id,
                  word=request.word,
                  is_correct=request.is_correct,
                  response_time=request.response_time,
                  mastery_level=result['word_progress']['mastery_level'])
    return AnswerResponse(**result)


@router.get("/api/user/words/due")
async def get_due_words(user_id: str, dictionary_id: str = None,
                        storage: Storage = Depends(get_storage),
                        service: LearningService = Depends(get_service)):
    """Unmastered words whose next review has passed."""
    require_user(storage, user_id)
    words = service.due_words(user_id, dictionary_id)
    return {"total": len(words), "words": [w.summary() for w in words]}


@router.get("/api/user/words/mastered")
async def get_mastered_words(user_id: str, dictionary_id: str = None,
                             storage: Storage = Depends(get_storage),
                             service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    words = service.mastered_words(user_id, dictionary_id)
    return {"total": len(words), "words": [w.summary() for w in words]}


@router.get("/api/user/words/struggling")
async def get_struggling_words(user_id: str, dictionary_id: str = None,
                               storage: Storage = Depends(get_storage),
                               service: LearningService = Depends(get_service)):
    """Attempted words still below mastery level 2."""
    require_user(storage, user_id)
    words = service.struggling_words(user_id, dictionary_id)
    return {"total": len(words), "words": [w.summary() for w in words]}


@router.post("/api/user/words/reset")
async def reset_word(request: WordActionRequest,
                     storage: Storage = Depends(get_storage),
                     service: LearningService = Depends(get_service)):
    require_user(storage, request.user_id)
    progress = service.reset_word(request.user_id, request.dictionary_id, request.word)
    log_event(storage, 'word.reset', request.user_id,
              dictionary_id=request.dictionary_id, word=request.word)
    return {"word_progress": progress.summary()}


@router.post("/api/user/words/master")
async def master_word(request: WordActionRequest,
                      storage: Storage = Depends(get_storage),
                      service: LearningService = Depends(get_service)):
    require_user(storage, request.user_id)
    progress = service.master_word(request.user_id, request.dictionary_id, request.word)
    log_event(storage, 'word.master', request.user_id,
              dictionary_id=request.dictionary_id, word=request.word)
    return {"word_progress": progress.summary()}


# Wrong Word Endpoints
@router.get("/api/wrong-words")
async def get_wrong_words(user_id: str, dictionary_id: str = None,
                          include_resolved: bool = False,
                          sort_by: SortOption = 'urgency',
                          limit: int = Query(DEFAULT_WRONG_WORDS_LIMIT, ge=1, le=MAX_WRONG_WORDS_LIMIT),
                          storage: Storage = Depends(get_storage),
                          service: LearningService = Depends(get_service)):
    """Wrong words with summary statistics."""
    require_user(storage, user_id)
    return {
        "sort_by": sort_by,
        **service.wrong_words(user_id, dictionary_id, include_resolved, sort_by, limit)
    }


@router.get("/api/wrong-words/review-queue", response_model=list[ReviewQueueEntry])
async def get_review_queue(user_id: str,
                           limit: int = Query(DEFAULT_REVIEW_QUEUE_LIMIT, ge=1, le=MAX_WRONG_WORDS_LIMIT),
                           storage: Storage = Depends(get_storage),
                           service: LearningService = Depends(get_service)):
    """Unresolved wrong words, most urgent first."""
    require_user(storage, user_id)
    return service.review_queue(user_id, limit)


@router.get("/api/wrong-words/dictionaries/{dictionary_id}")
async def get_dictionary_wrong_words(dictionary_id: str, user_id: str,
                                     include_resolved: bool = False,
                                     limit: int = Query(DEFAULT_WRONG_WORDS_LIMIT, ge=1, le=MAX_WRONG_WORDS_LIMIT),
                                     storage: Storage = Depends(get_storage),
                                     service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return {
        "dictionary_id": dictionary_id,
        **service.wrong_words(user_id, dictionary_id, include_resolved, 'recent', limit)
    }


@router.get("/api/wrong-words/high-priority")
async def get_high_priority_words(user_id: str,
                                  min_priority: int = Query(HIGH_PRIORITY, ge=MIN_PRIORITY, le=MAX_PRIORITY),
                                  limit: int = Query(20, ge=1, le=MAX_WRONG_WORDS_LIMIT),
                                  storage: Storage = Depends(get_storage),
                                  service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    records = service.high_priority_words(user_id, min_priority, limit)
    return {
        "criteria": {"min_priority": min_priority, "limit": limit},
        "wrong_words": [r.summary() for r in records]
    }


@router.get("/api/wrong-words/analytics")
async def get_wrong_words_analytics(user_id: str, timeframe: int = Query(30, ge=1),
                                    storage: Storage = Depends(get_storage),
                                    service: LearningService = Depends(get_service)):
    """Overall, recent, per dictionary and priority figures."""
    require_user(storage, user_id)
    return service.wrong_word_analytics(user_id, timeframe)


@router.post("/api/wrong-words/{wrong_word_id}/review")
async def review_wrong_word(wrong_word_id: str, request: ReviewRequest,
                            storage: Storage = Depends(get_storage),
                            service: LearningService = Depends(get_service)):
    require_user(storage, request.user_id)
    record = service.review_wrong_word(
        request.user_id, wrong_word_id, request.was_successful,
        request.review_method, request.response_time, request.confidence_level
    )
    log_event(storage, 'wrong_word.review', request.user_id,
              dictionary_id=record.dictionary_id,
              word=record.word,
              was_successful=request.was_successful,
              is_resolved=record.is_resolved)
    return {
        "wrong_word": {
            "id": record.id,
            "word": record.word,
            "review_status": record.review_status,
            "is_resolved": record.is_resolved,
            "successful_review_rate": record.successful_review_rate,
            "total_review_attempts": record.total_review_attempts
        }
    }


@router.put("/api/wrong-words/{wrong_word_id}/resolved")
async def mark_wrong_word_resolved(wrong_word_id: str, user_id: str,
                                   storage: Storage = Depends(get_storage),
                                   service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return {"wrong_word": service.mark_resolved(user_id, wrong_word_id).summary()}


@router.put("/api/wrong-words/{wrong_word_id}/unresolved")
async def mark_wrong_word_unresolved(wrong_word_id: str, user_id: str,
                                     storage: Storage = Depends(get_storage),
                                     service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    return {"wrong_word": service.mark_unresolved(user_id, wrong_word_id).summary()}


@router.put("/api/wrong-words/{wrong_word_id}/notes")
async def update_learning_notes(wrong_word_id: str, request: NotesRequest,
                                storage: Storage = Depends(get_storage),
                                service: LearningService = Depends(get_service)):
    require_user(storage, request.user_id)
    notes = request.model_dump(exclude={'user_id'}, exclude_none=True)
    record = service.update_notes(request.user_id, wrong_word_id, **notes)
    return {"learning_notes": record.learning_notes}


@router.post("/api/wrong-words/{wrong_word_id}/hints", response_model=HintsResponse)
async def generate_hints(wrong_word_id: str, request: HintsRequest,
                         storage: Storage = Depends(get_storage),
                         service: LearningService = Depends(get_service),
                         provider: AIProvider | None = Depends(get_hint_provider)):
    """Generate study hints for a wrong word with the AI provider."""
    require_user(storage, request.user_id)
    if provider is None:
        raise HTTPException(status_code=503, detail="Hint generation is not configured")
    record, hints, generate_ms = service.generate_hints(request.user_id, wrong_word_id, provider)
    log_event(storage, 'hint.generate', request.user_id,
              dictionary_id=record.dictionary_id,
              word=record.word,
              hint_count=len(hints),
              generate_ms=generate_ms)
    return HintsResponse(
        word=record.word,
        hints=hints,
        total_hints=len(record.auto_generated_hints),
        generate_ms=generate_ms
    )


@router.put("/api/wrong-words/{wrong_word_id}/hints/{index}")
async def rate_hint(wrong_word_id: str, index: int, request: HintRatingRequest,
                    storage: Storage = Depends(get_storage),
                    service: LearningService = Depends(get_service)):
    require_user(storage, request.user_id)
    record = service.rate_hint(request.user_id, wrong_word_id, index, request.rating)
    return {"hints": record.auto_generated_hints}


@router.delete("/api/wrong-words/{wrong_word_id}")
async def delete_wrong_word(wrong_word_id: str, user_id: str,
                            storage: Storage = Depends(get_storage),
                            service: LearningService = Depends(get_service)):
    require_user(storage, user_id)
    record = service.delete_wrong_word(user_id, wrong_word_id)
    return {"deleted_word": {"id": record.id, "word": record.word}}


@router.get("/api/events/recent")
async def get_recent_events(user_id: str, event_type: str = None, limit: int = 50,
                            storage: Storage = Depends(get_storage)):
    """Get recent events for a user."""
    if not hasattr(storage, 'get_user_events'):
        return {"error": "Event logging not available with current storage"}

    events = storage.get_user_events(user_id, event_type, limit)
    # Convert datetime objects to strings for JSON serialization
    for event in events:
        if 'timestamp' in event and hasattr(event['timestamp'], 'isoformat'):
            event['timestamp'] = event['timestamp'].isoformat()
    return {"events": events}


@router.get("/api/admin/stats")
async def get_dashboard_stats(service: LearningService = Depends(get_service)):
    """Totals across all users and dictionaries."""
    return service.dashboard_stats()


async def lookup_error_handler(request: Request, exc: LookupError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def storage_from_env() -> Storage:
    """Use PostgreSQL by default, set VOCABIN_STORAGE=file to use file storage."""
    storage_type = os.environ.get('VOCABIN_STORAGE', 'postgres')
    if storage_type == 'file':
        from server.file_storage import FileStorage
        logger.info("Using file storage")
        return FileStorage(state_dir=os.environ.get('VOCABIN_STATE_DIR'))
    from server.postgres_storage import PostgresStorage
    logger.info("Using PostgreSQL storage")
    return PostgresStorage()


def hint_provider_from_env(storage: Storage) -> AIProvider | None:
    """Gemini provider if an API key is configured, else None."""
    # Get API key from environment variable first, then fall back to config file
    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        try:
            api_key = storage.load_config().get('gemini_api_key')
        except FileNotFoundError:
            pass
    if not api_key:
        logger.warning("GEMINI_API_KEY not set and no config file found; hint generation disabled")
        return None
    from server.gemini_provider import GeminiProvider
    return GeminiProvider(api_key)


def create_app(storage: Storage = None, catalog: DictionaryCatalog = None,
               hint_provider: AIProvider = None) -> FastAPI:
    """Build the application. Anything not passed in is created from the environment on startup."""
    app = FastAPI(title="Vocabin API", description="Vocabulary learning with spaced repetition")
    app.state.storage = storage
    app.state.catalog = catalog
    app.state.hint_provider = hint_provider
    app.include_router(router)
    for error in (DictionaryNotFoundError, WordIndexError, ProgressNotFoundError,
                  WrongWordNotFoundError, HintNotFoundError):
        app.add_exception_handler(error, lookup_error_handler)

    @app.on_event("startup")
    async def startup():
        """Initialize storage, dictionaries and the hint provider on startup."""
        if app.state.storage is None:
            app.state.storage = storage_from_env()
        if app.state.catalog is None:
            dict_dir = os.environ.get('VOCABIN_DICT_DIR', str(DEFAULT_DICT_DIR))
            app.state.catalog = DictionaryCatalog(dict_dir)
            app.state.catalog.load()
        if app.state.hint_provider is None:
            app.state.hint_provider = hint_provider_from_env(app.state.storage)

    return app
