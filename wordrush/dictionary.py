# Word list loading and letter pool generation.
# The dictionary is loaded once per process and never mutated afterwards.
# A missing or empty word list does not stop the server: the dictionary is
# simply marked as not loaded and every submitted word is rejected.

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Tuple
import logging
import random
import secrets
from .config import (
    CODE_ALPHABET, CODE_LENGTH, FALLBACK_WORD, LETTER_COUNT, MIN_WORD_LENGTH, WORDS_PATH
)

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Dictionary:
    words: FrozenSet[str]
    seeds: Tuple[str, ...]
    loaded: bool

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "Dictionary":
        cleaned = [w.strip().upper() for w in words]
        kept = [w for w in cleaned if len(w) >= MIN_WORD_LENGTH]
        word_set = frozenset(kept)
        # Seeds become letter pools, so entries like "ABBY'S" or "CO-OPS" are skipped.
        seeds = tuple(sorted(w for w in word_set if len(w) == LETTER_COUNT and w.isalpha()))
        return cls(words=word_set, seeds=seeds, loaded=bool(word_set))

    @classmethod
    def load(cls, path: Path) -> "Dictionary":
        try:
            with open(path, "r", encoding="utf-8", errors="ignore") as f:
                dictionary = cls.from_words(f)
        except OSError as e:
            logger.error("Error loading word list %s: %s", path, e)
            logger.warning("Server will start but word validation will fail")
            return cls(words=frozenset(), seeds=(), loaded=False)

        if not dictionary.loaded:
            logger.warning("Word list %s is empty; every word will be rejected", path)
        else:
            logger.info(
                "Loaded %s words from %s (%s six-letter words)",
                len(dictionary.words), path, len(dictionary.seeds)
            )
        return dictionary

    def is_valid_word(self, word: str) -> bool:
        w = word.strip().upper()
        if len(w) < MIN_WORD_LENGTH:
            return False
        return w in self.words

    def generate_letters(self, rng: Optional[random.Random] = None) -> str:
        rng = rng or random.SystemRandom()
        seed = rng.choice(self.seeds) if self.seeds else FALLBACK_WORD
        letters = list(seed)
        # random.shuffle is a Fisher-Yates shuffle, every permutation is equally likely.
        rng.shuffle(letters)
        return "".join(letters)


def generate_code(rng: Optional[random.Random] = None) -> str:
    if rng is None:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


# Process-wide dictionary, loaded on first use.
_DICTIONARY: Optional[Dictionary] = None

def get_dictionary() -> Dictionary:
    global _DICTIONARY
    if _DICTIONARY is None:
        _DICTIONARY = Dictionary.load(WORDS_PATH)
    return _DICTIONARY

def set_dictionary(dictionary: Dictionary) -> None:
    global _DICTIONARY
    _DICTIONARY = dictionary
