GRID_SIZE = 8

# A click only clears along an axis when the run through the clicked cell is at least this long.
MIN_RUN_LENGTH = 3

# Chain reactions after a refill are only resolved when cascade mode is on; this bounds the loop.
MAX_CASCADE_DEPTH = 32


# ============================================================================
# SCORING
# ============================================================================
POINTS_PER_TILE = 10
SHARE_BONUS = 50

# Guess games start at this reward and lose ATTEMPT_PENALTY per wrong attempt (never below zero).
GUESS_BASE_REWARD = 100
ATTEMPT_PENALTY = 10


# ============================================================================
# LEADERBOARD & PERSISTENCE
# ============================================================================
LEADERBOARD_CAPACITY = 10
LEADERBOARD_KEY = "leaderboard"
DEFAULT_PLAYER_NAME = "Anonymous"

# Overrides the default on-disk location used by JsonFileStore.
DATA_DIR_ENV = "KOJO_DATA_DIR"
