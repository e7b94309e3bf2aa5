APP_VERSION = "1.0.0"

NUM_PLAYERS = 4
NUM_SETS = 3
REFERENCE_PLAYER = 0

MAX_NAME_LENGTH = 20
TEAM_SIZE = 2

SCORE_FIELDS = ("won", "lost")
# int() refuses longer digit strings by default
MAX_SCORE_DIGITS = 4300

EXPORT_FILENAME_PREFIX = "paddle-match-results"
