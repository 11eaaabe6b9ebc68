# FastAPI server implementing the WordRush API.
# Provides:
# - POST   /api/games: create a round
# - GET    /api/games/{code}: round state (finishes the round if its time is up)
# - POST   /api/games/{code}/join: join a waiting round
# - POST   /api/games/{code}/start: start the timer
# - POST   /api/games/{code}/words: submit a word
# - DELETE /api/games/{code}/words: retract a word
# - GET    /api/games/{code}/standings: ranked scores
# - GET    /api/dictionary: word list status
#
# Clients poll GET /api/games/{code}; there is no push channel.
#
# Run: uvicorn wordrush.main:app --host 0.0.0.0 --port 3000

from __future__ import annotations
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import logging
from . import game
from .cleanup import RetentionSweeper
from .config import CLEANUP_INTERVAL_SECONDS, CORS_ORIGINS, GAMES_DIR, ROUND_DURATION, STORE_BACKEND
from .dictionary import Dictionary, get_dictionary, set_dictionary
from .models import (
    CreateRoundResponse, DictionaryInfo, JoinRequest, JoinResponse, RetractWordResponse,
    RoundDocument, StandingEntry, StandingsResponse, SubmitWordResponse, WordRequest
)
from .store import FileGameStore, GameStore, MemoryGameStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

def build_store(backend: str = STORE_BACKEND) -> GameStore:
    if backend == "memory":
        return MemoryGameStore()
    if backend == "sql":
        from .db import SqlGameStore
        return SqlGameStore()
    if backend == "file":
        return FileGameStore(GAMES_DIR)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

def get_store(request: Request) -> GameStore:
    return request.app.state.store

def current_dictionary(request: Request) -> Dictionary:
    return request.app.state.dictionary or get_dictionary()

def http_error(e: game.GameError) -> HTTPException:
    if isinstance(e, game.NotFound):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))

@router.get("/dictionary", response_model=DictionaryInfo)
def dictionary_info(dictionary: Dictionary = Depends(current_dictionary)):
    return DictionaryInfo(loaded=dictionary.loaded, count=len(dictionary.words), seed_count=len(dictionary.seeds))

@router.post("/games", response_model=CreateRoundResponse)
def api_create(request: Request, store: GameStore = Depends(get_store),
               dictionary: Dictionary = Depends(current_dictionary)):
    rnd = game.create_round(store, dictionary, duration=request.app.state.round_duration)
    return CreateRoundResponse(code=rnd.code, letters=rnd.letters)

@router.get("/games/{code}", response_model=RoundDocument)
def api_state(code: str, store: GameStore = Depends(get_store)):
    try:
        rnd = game.get_round(store, code)
    except game.GameError as e:
        raise http_error(e)
    return rnd.to_document()

@router.post("/games/{code}/join", response_model=JoinResponse)
def api_join(code: str, req: JoinRequest, store: GameStore = Depends(get_store)):
    try:
        player_id, rnd = game.join_round(store, code, req.player_name)
    except game.GameError as e:
        raise http_error(e)
    return JoinResponse(player_id=player_id, game=rnd.to_document())

@router.post("/games/{code}/start", response_model=RoundDocument)
def api_start(code: str, store: GameStore = Depends(get_store)):
    try:
        rnd = game.start_round(store, code)
    except game.GameError as e:
        raise http_error(e)
    return rnd.to_document()

@router.post("/games/{code}/words", response_model=SubmitWordResponse, response_model_exclude_none=True)
def api_submit_word(code: str, req: WordRequest, store: GameStore = Depends(get_store),
                    dictionary: Dictionary = Depends(current_dictionary)):
    try:
        sub = game.submit_word(store, code, req.player_id, req.word, dictionary)
    except game.GameError as e:
        raise http_error(e)
    if not sub.accepted:
        return SubmitWordResponse(accepted=False, reason=sub.reason)
    return SubmitWordResponse(accepted=True, word=sub.word, points=sub.points)

@router.delete("/games/{code}/words", response_model=RetractWordResponse)
def api_retract_word(code: str, req: WordRequest, store: GameStore = Depends(get_store)):
    try:
        game.retract_word(store, code, req.player_id, req.word)
    except game.GameError as e:
        raise http_error(e)
    return RetractWordResponse(success=True)

@router.get("/games/{code}/standings", response_model=StandingsResponse)
def api_standings(code: str, store: GameStore = Depends(get_store)):
    try:
        rnd, standings = game.round_standings(store, code)
    except game.GameError as e:
        raise http_error(e)
    return StandingsResponse(
        code=rnd.code,
        status=rnd.status,
        standings=[StandingEntry(**s) for s in standings],
    )

def create_app(
    store: Optional[GameStore] = None,
    dictionary: Optional[Dictionary] = None,
    round_duration: int = ROUND_DURATION,
    cleanup_interval: int = CLEANUP_INTERVAL_SECONDS,
) -> FastAPI:
    app = FastAPI(title="WordRush", version="1.0.0")

    # CORS for dev convenience
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    app.state.store = store if store is not None else build_store()
    app.state.dictionary = dictionary
    app.state.round_duration = round_duration
    app.state.sweeper = RetentionSweeper(app.state.store, interval=cleanup_interval)

    @app.on_event("startup")
    def startup():
        if app.state.dictionary is None:
            app.state.dictionary = get_dictionary()
        else:
            set_dictionary(app.state.dictionary)
        app.state.sweeper.start()
        logger.info("Round duration: %s seconds", app.state.round_duration)

    @app.on_event("shutdown")
    def shutdown():
        app.state.sweeper.stop()

    app.include_router(router)
    return app

app = create_app()
