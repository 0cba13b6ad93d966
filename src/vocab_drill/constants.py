"""Drill policy constants."""

WORDS_PER_DAY = 10
THINKING_TIME = 10  # seconds per timed prompt
TICK_INTERVAL = 1.0
SETTLE_DELAY = 1.5

PUNISHMENT_BASE = 20
PUNISHMENT_STEP = 10

PROGRESS_KEY = "vocab_progress"
