# Configuration module for server-side constants and defaults.
# Values that differ between deployments can be overridden from the environment.

import os
from pathlib import Path

# Length of a round in seconds.
ROUND_DURATION = int(os.environ.get("ROUND_DURATION", "60"))

# Path to the word list (one word per line, any case).
WORDS_PATH = Path(os.environ.get("WORDS_PATH") or Path(__file__).parent / "wordlist.txt")

# Which Game Store backs the API: "file", "sql" or "memory".
STORE_BACKEND = os.environ.get("STORE_BACKEND", "file")

# Directory holding one JSON document per round for the file store.
GAMES_DIR = Path(os.environ.get("GAMES_DIR") or Path(__file__).parent / "games")

# SQLite DB file path for the SQL store.
DB_PATH = Path(os.environ.get("DB_PATH") or Path(__file__).parent / "wordrush.db")

# Rounds older than this are purged by the retention sweep.
RETENTION_SECONDS = int(os.environ.get("RETENTION_SECONDS", str(24 * 60 * 60)))

# How often the retention sweep runs. 0 disables the background worker.
CLEANUP_INTERVAL_SECONDS = int(os.environ.get("CLEANUP_INTERVAL_SECONDS", str(60 * 60)))

# CORS origins (if you deploy the client separately, add its domain here).
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")

# Round codes avoid characters that are easy to confuse (0/O, 1/I).
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

# Every round plays with the letters of one six-letter word.
LETTER_COUNT = 6
MIN_WORD_LENGTH = 3

# Letters used when the dictionary has no six-letter words.
FALLBACK_WORD = "MASTER"
