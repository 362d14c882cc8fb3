"""MongoDB index management.

Indexes are declared by each repository and reconciled at app startup.
The unique email index is what actually guarantees one account per email,
so a stale index with the same name but different keys or options is replaced.
"""

from logging import getLogger

logger = getLogger(__name__)


def ensure_index(collection, keys: list, name: str, **options) -> bool:
    """Create ``name`` unless an identical index already exists.

    Returns True when the index exists with the requested keys and options afterwards.
    PyMongoError propagates to the caller.
    """
    wanted_keys = dict(keys)
    existing = collection.index_information()

    current = existing.get(name)
    if current is not None:
        same_keys = dict(current.get('key', [])) == wanted_keys
        same_unique = bool(current.get('unique', False)) == bool(options.get('unique', False))
        if same_keys and same_unique:
            return True
        logger.warning("Replacing index with outdated definition", extra={"index": name})
        collection.drop_index(name)

    collection.create_index(keys, name=name, **options)
    logger.info("Index ensured", extra={"index": name, "collection": collection.name})
    return True


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.user_repository import MongoUserRepository

    return MongoUserRepository(db).ensure_indexes()
