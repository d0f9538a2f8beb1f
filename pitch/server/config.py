"""Database and application configuration."""
import os

DATABASE_CONFIG = {
    'host': os.getenv('DB_HOST', 'localhost'),
    'port': os.getenv('DB_PORT', '5432'),
    'database': os.getenv('DB_NAME', 'pitch'),
    'user': os.getenv('DB_USER', os.getenv('USER', 'postgres')),
    'password': os.getenv('DB_PASSWORD', ''),
}

# Room persistence: "memory" or "postgres"
ROOM_STORE = os.getenv('ROOM_STORE', 'memory')
ROOM_TTL = int(os.getenv('ROOM_TTL', str(60 * 60 * 4)))  # 4 hours
ROOM_KEY_PREFIX = os.getenv('ROOM_KEY_PREFIX', 'pitch:')

# Server pacing (ms)
AI_DELAY = int(os.getenv('AI_DELAY', '800'))
PHASE_DELAY = int(os.getenv('PHASE_DELAY', '1500'))
CUT_DELAY = int(os.getenv('CUT_DELAY', '2500'))
DEAL_DELAY = int(os.getenv('DEAL_DELAY', '0'))
HAND_OVER_DELAY = int(os.getenv('HAND_OVER_DELAY', '3000'))

# Solo pacing (ms)
SOLO_AI_DELAY = 700
SOLO_AI_BID_DELAY = 1400
SOLO_TRICK_PAUSE = 1400
SOLO_CUT_DELAY = 2500
SOLO_HAND_OVER_DELAY = 3000

POLL_MS = 700

# Client timeouts (seconds)
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '5'))
POLL_TIMEOUT = float(os.getenv('POLL_TIMEOUT', '3'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
GAME_LOG_DIR = os.getenv('GAME_LOG_DIR', '')

FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
FLASK_PORT = int(os.getenv('FLASK_PORT', '3000'))
FLASK_DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
