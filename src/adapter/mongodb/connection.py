"""Process-wide MongoDB client.

One client is created lazily and reused. A cached client that stops
answering pings is dropped and rebuilt on the next call. If the very first
connection attempt fails the settings are assumed wrong and no further
attempts are made until ``reset_client()``.
"""

import os
import logging
from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

logging.getLogger('pymongo').setLevel(logging.WARNING)

# Defaults are for local development only
MONGO_URL = os.getenv('MONGO_URL', 'mongodb://localhost:27017')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'users_management')
USERS_COLLECTION_NAME = 'users'

CLIENT_OPTIONS = {
    'serverSelectionTimeoutMS': 5000,
    'connectTimeoutMS': 5000,
    'socketTimeoutMS': 30000,
    'maxPoolSize': 10,
    'minPoolSize': 0,
    'maxIdleTimeMS': 30000,
    'waitQueueTimeoutMS': 10000,
    # Duplicate-key and validation failures are terminal
    'retryWrites': False,
    'retryReads': True,
    # Decode BSON dates as UTC-aware datetimes
    'tz_aware': True,
}

_client_cache: MongoClient | None = None
_ever_connected = False
_gave_up = False


def reset_client():
    """Forget the cached client and any earlier failure."""
    global _client_cache, _ever_connected, _gave_up
    _client_cache = None
    _ever_connected = False
    _gave_up = False


def close_client():
    """Close the cached client, if any. Called on app shutdown."""
    global _client_cache
    if _client_cache is not None:
        _client_cache.close()
        _client_cache = None
        logger.info("MongoDB client closed")


def _is_alive(client: MongoClient) -> bool:
    try:
        client.admin.command('ping')
        return True
    except PyMongoError:
        return False


def get_mongodb_client() -> MongoClient | None:
    """Return a live client, or None when MongoDB is unreachable."""
    global _client_cache, _ever_connected, _gave_up

    if _client_cache is not None:
        if _is_alive(_client_cache):
            return _client_cache
        logger.warning("MongoDB ping failed, reconnecting")
        _client_cache = None

    if _gave_up:
        return None

    if not MONGO_URL:
        logger.error("MONGO_URL is not configured")
        _gave_up = True
        return None

    try:
        client = MongoClient(MONGO_URL, **CLIENT_OPTIONS)
        client.admin.command('ping')
    except PyMongoError as e:
        if not _ever_connected:
            logger.error("Initial MongoDB connection failed", extra={"error": str(e)[:200]})
            _gave_up = True
        return None

    if not _ever_connected:
        logger.info("Connected to MongoDB", extra={"database": DATABASE_NAME})
    _ever_connected = True
    _client_cache = client
    return client
