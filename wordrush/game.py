# Round state machine and store-backed game operations.
# Lifecycle: waiting --start()--> active --(timer elapsed, seen on read)--> finished
# - Players join only while waiting; words are submitted/retracted only while active.
# - There is no background timer: a round becomes finished the first time it
#   is loaded after its duration has elapsed, and that is persisted.
# - A player's score is always the sum of the points of their words. Retracting
#   subtracts the points recorded at submission time, never a recomputed value.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, TypeVar
import logging
import secrets
import time
from .config import CODE_ALPHABET, CODE_LENGTH, ROUND_DURATION
from .dictionary import Dictionary, generate_code, get_dictionary
from .models import PlayerDocument, RoundDocument, WordEntry
from .scoring import normalize_word, rejection_reason, score_word
from .store import GameStore, RoundLocks

logger = logging.getLogger(__name__)

T = TypeVar("T")

class GameError(ValueError):
    """Base class for request-level game errors."""

class NotFound(GameError):
    pass

class InvalidState(GameError):
    pass

class InvalidInput(GameError):
    pass

def now_ms() -> int:
    return int(time.time() * 1000)

@dataclass
class PlayerState:
    player_id: str
    name: str
    words: List[WordEntry] = field(default_factory=list)
    score: int = 0

    def has_word(self, word: str) -> bool:
        return any(w.word == word for w in self.words)

@dataclass
class Submission:
    accepted: bool
    word: str
    points: int = 0
    reason: Optional[str] = None

@dataclass
class Round:
    code: str
    letters: str
    duration: int
    created_at: int
    status: str = "waiting"  # "waiting"|"active"|"finished"
    start_time: Optional[int] = None
    players: Dict[str, PlayerState] = field(default_factory=dict)

    @classmethod
    def new(cls, code: str, letters: str, duration: int, now: int) -> "Round":
        return cls(code=code, letters=letters, duration=duration, created_at=now)

    def _require_status(self, status: str, message: str) -> None:
        if self.status != status:
            raise InvalidState(message)

    def _player(self, player_id: str) -> PlayerState:
        p = self.players.get(player_id)
        if not p:
            raise NotFound("Player not found")
        return p

    def join(self, name: Optional[str], now: int) -> str:
        self._require_status("waiting", "Game already started")
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Player name required")

        player_id = f"player_{now}_{secrets.token_hex(5)}"
        while player_id in self.players:
            player_id = f"player_{now}_{secrets.token_hex(5)}"
        self.players[player_id] = PlayerState(player_id=player_id, name=name)
        return player_id

    def start(self, now: int) -> None:
        self._require_status("waiting", "Game already started")
        self.status = "active"
        self.start_time = now

    def is_expired(self, now: int) -> bool:
        if self.status != "active" or self.start_time is None:
            return False
        return (now - self.start_time) / 1000 >= self.duration

    def refresh(self, now: int) -> bool:
        """Finish the round if its time is up. Returns True if the status changed."""
        if not self.is_expired(now):
            return False
        self.status = "finished"
        return True

    def submit_word(self, player_id: str, word: str, dictionary: Dictionary) -> Submission:
        self._require_status("active", "Game not active")
        p = self._player(player_id)

        w = normalize_word(word)
        reason = rejection_reason(w, self.letters, dictionary, (e.word for e in p.words))
        if reason is not None:
            return Submission(accepted=False, word=w, reason=reason)

        points = score_word(w)
        p.words.append(WordEntry(word=w, points=points))
        p.score += points
        return Submission(accepted=True, word=w, points=points)

    def retract_word(self, player_id: str, word: str) -> bool:
        self._require_status("active", "Game not active")
        p = self._player(player_id)

        w = normalize_word(word)
        for idx, entry in enumerate(p.words):
            if entry.word == w:
                removed = p.words.pop(idx)
                p.score -= removed.points
                return True
        return False

    def standings(self) -> List[dict]:
        """
        Players sorted by score DESC, then name. Equal scores share a rank and
        subsequent ranks skip accordingly (1,1,3).
        """
        entries = sorted(self.players.values(), key=lambda p: (-p.score, p.name.lower(), p.player_id))

        ranked = []
        last_score = None
        last_rank = 0
        for idx, p in enumerate(entries):
            if p.score == last_score:
                rank = last_rank
            else:
                rank = idx + 1
                last_score = p.score
                last_rank = rank
            ranked.append({
                "rank": rank,
                "player_id": p.player_id,
                "name": p.name,
                "score": p.score,
                "word_count": len(p.words),
            })
        return ranked

    def to_document(self) -> RoundDocument:
        return RoundDocument(
            code=self.code,
            letters=self.letters,
            status=self.status,
            start_time=self.start_time,
            duration=self.duration,
            created_at=self.created_at,
            players={
                pid: PlayerDocument(name=p.name, words=[w.model_copy() for w in p.words], score=p.score)
                for pid, p in self.players.items()
            },
        )

    @classmethod
    def from_document(cls, doc: RoundDocument) -> "Round":
        return cls(
            code=doc.code,
            letters=doc.letters,
            duration=doc.duration,
            created_at=doc.created_at,
            status=doc.status,
            start_time=doc.start_time,
            players={
                pid: PlayerState(player_id=pid, name=p.name, words=list(p.words), score=p.score)
                for pid, p in doc.players.items()
            },
        )


# Per-code locks shared by every operation in this process.
LOCKS = RoundLocks()

MAX_CODE_ATTEMPTS = 20

def normalize_code(code: str) -> str:
    c = (code or "").strip().upper()
    if len(c) != CODE_LENGTH or any(ch not in CODE_ALPHABET for ch in c):
        raise NotFound("Game not found")
    return c

def _load(store: GameStore, code: str) -> Round:
    doc = store.get(code)
    if doc is None:
        raise NotFound("Game not found")
    return Round.from_document(doc)

def _save(store: GameStore, code: str, doc: RoundDocument) -> None:
    # A round purged by the retention sweep mid-request stays deleted.
    if not store.exists(code):
        raise NotFound("Game not found")
    store.put(code, doc)

def _apply(store: GameStore, code: str, now: Optional[int], action: Callable[[Round], T]) -> Tuple[Round, T]:
    """Load, finalize if expired, run `action`, and save whatever changed."""
    code = normalize_code(code)
    now = now_ms() if now is None else now
    with LOCKS.for_code(code):
        rnd = _load(store, code)
        before = rnd.to_document()
        if rnd.refresh(now):
            logger.info("Round %s finished", code)
        try:
            result = action(rnd)
        finally:
            after = rnd.to_document()
            if after != before:
                _save(store, code, after)
    return rnd, result

def create_round(
    store: GameStore,
    dictionary: Optional[Dictionary] = None,
    duration: int = ROUND_DURATION,
    now: Optional[int] = None,
) -> Round:
    dictionary = dictionary or get_dictionary()
    now = now_ms() if now is None else now

    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_code()
        with LOCKS.for_code(code):
            if store.exists(code):
                continue
            rnd = Round.new(code, dictionary.generate_letters(), duration, now)
            store.put(code, rnd.to_document())
        logger.info("Created round %s (duration=%ss)", code, duration)
        return rnd
    raise RuntimeError("Could not allocate an unused round code")

def get_round(store: GameStore, code: str, now: Optional[int] = None) -> Round:
    rnd, _ = _apply(store, code, now, lambda r: None)
    return rnd

def join_round(store: GameStore, code: str, name: Optional[str], now: Optional[int] = None) -> Tuple[str, Round]:
    stamp = now_ms() if now is None else now
    rnd, player_id = _apply(store, code, stamp, lambda r: r.join(name, stamp))
    return player_id, rnd

def start_round(store: GameStore, code: str, now: Optional[int] = None) -> Round:
    stamp = now_ms() if now is None else now
    rnd, _ = _apply(store, code, stamp, lambda r: r.start(stamp))
    logger.info("Started round %s with %s players", rnd.code, len(rnd.players))
    return rnd

def submit_word(
    store: GameStore,
    code: str,
    player_id: str,
    word: str,
    dictionary: Optional[Dictionary] = None,
    now: Optional[int] = None,
) -> Submission:
    dictionary = dictionary or get_dictionary()
    _, submission = _apply(store, code, now, lambda r: r.submit_word(player_id, word, dictionary))
    return submission

def retract_word(store: GameStore, code: str, player_id: str, word: str, now: Optional[int] = None) -> bool:
    _, removed = _apply(store, code, now, lambda r: r.retract_word(player_id, word))
    return removed

def round_standings(store: GameStore, code: str, now: Optional[int] = None) -> Tuple[Round, List[dict]]:
    rnd = get_round(store, code, now)
    return rnd, rnd.standings()
