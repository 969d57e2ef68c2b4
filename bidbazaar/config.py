"""
Configuration constants for the BidBazaar live auction controller.
"""

import os

# ===== API SERVER CONFIGURATION =====

API_HOST = os.getenv('BIDBAZAAR_HOST', '127.0.0.1')
API_PORT = int(os.getenv('BIDBAZAAR_PORT', '3000'))
API_TITLE = 'BidBazaar Auction API'
API_VERSION = '1.0.0'

# Admin credentials (no admin check when the password is unset)
ADMIN_USERNAME = os.getenv('BIDBAZAAR_ADMIN_USER', 'admin')
ADMIN_PASSWORD = os.getenv('BIDBAZAAR_ADMIN_PASSWORD')
ADMIN_TOKEN_HEADER = 'X-Admin-Token'

# ===== STORAGE =====

UPLOADS_DIR = 'data/uploads'
UPLOADS_URL_PREFIX = '/uploads'
AUCTION_EVENTS_FILE = 'data/auction_events/events.jsonl'
STATE_CHECKPOINT_FILE = 'data/auction_state.json'
OUTPUT_DIR = 'data/output'

# ===== COUNTDOWN =====

DEFAULT_COUNTDOWN_DURATION = 60  # seconds, when a start request omits it
MAX_COUNTDOWN_DURATION = 3600    # one hour
COUNTDOWN_TICK_SECONDS = 1.0

# ===== MYSTERY ITEMS =====

# Shown in place of a mystery product's details until it sells
MYSTERY_NAME = 'Mystery Item'
MYSTERY_DESCRIPTION = 'Details will be revealed after sold'
MYSTERY_IMAGE_URL = '/uploads/mystery-box.jpg'

# ===== LOGGING =====

LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
