# Word validation and scoring.
# Everything here is pure: the same inputs always give the same answer.

from __future__ import annotations
from collections import Counter
from typing import Iterable, Optional
from .config import MIN_WORD_LENGTH
from .dictionary import Dictionary

# Points by word length; 8 letters and longer use the formula in score_word.
POINTS_BY_LENGTH = {3: 100, 4: 400, 5: 800, 6: 1400, 7: 1800}

TOO_SHORT = "Word must be at least 3 letters"
CANNOT_FORM = "Cannot form word from available letters"
NOT_IN_DICTIONARY = "Word not in dictionary"
ALREADY_SUBMITTED = "Word already submitted"

def normalize_word(word: str) -> str:
    return word.strip().upper()

def can_form(word: str, letters: str) -> bool:
    """Each letter tile may be used at most once per word."""
    remaining = Counter(letters)
    for ch in word:
        if remaining[ch] <= 0:
            return False
        remaining[ch] -= 1
    return True

def score_word(word: str) -> int:
    length = len(word)
    if length < MIN_WORD_LENGTH:
        return 0
    if length in POINTS_BY_LENGTH:
        return POINTS_BY_LENGTH[length]
    return 2300 + (length - 8) * 500

def rejection_reason(
    word: str, letters: str, dictionary: Dictionary, already_submitted: Iterable[str]
) -> Optional[str]:
    """
    Run the acceptance checks in order and return the first failure, or None
    if the word is accepted. `word` must already be normalized.
    """
    if len(word) < MIN_WORD_LENGTH:
        return TOO_SHORT
    if not can_form(word, letters):
        return CANNOT_FORM
    if not dictionary.is_valid_word(word):
        return NOT_IN_DICTIONARY
    if word in set(already_submitted):
        return ALREADY_SUBMITTED
    return None
