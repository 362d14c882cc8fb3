"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, StorageError
from domain.model.user import User, UserPage

logger = getLogger(__name__)

_UPDATABLE_FIELDS = {'first_name', 'last_name', 'phone', 'password_hash'}


def _utc_now() -> datetime:
    """Current UTC time at BSON precision (milliseconds)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _as_utc(value: datetime) -> datetime:
    # Clients without tz_aware=True decode BSON dates as naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import ensure_index

        try:
            ensure_index(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            ensure_index(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            first_name=doc['first_name'],
            last_name=doc['last_name'],
            email=doc['email'],
            phone=doc.get('phone'),
            created_at=_as_utc(doc['created_at']),
            updated_at=_as_utc(doc['updated_at']),
            password_hash=doc.get('password_hash'),
        )

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
    ) -> User:
        """Insert a new user. The unique email index decides duplicates."""
        user_id = uuid.uuid4().hex
        now = _utc_now()
        user_doc = {
            '_id': user_id,
            'first_name': first_name,
            'last_name': last_name,
            'email': email,
            'phone': phone,
            'password_hash': password_hash,
            'created_at': now,
            'updated_at': now,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": email})
            raise DuplicateEmailError(email)
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": email, "error": str(e)})
            raise StorageError("Failed to create user") from e

        logger.info("User created", extra={"userId": user_id, "email": email})
        return self._to_domain(user_doc)

    def update(self, user_id: str, fields: dict) -> User | None:
        """Apply allowed field changes and refresh updated_at."""
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE_FIELDS}
        changes['updated_at'] = _utc_now()
        try:
            doc = self.collection.find_one_and_update(
                {'_id': user_id},
                {'$set': changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise StorageError("Failed to update user") from e

        if doc is None:
            logger.warning("User not found for update", extra={"userId": user_id})
            return None

        logger.info("User updated", extra={"userId": user_id, "fields": sorted(changes)})
        return self._to_domain(doc)

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise StorageError("Failed to read user") from e
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise StorageError("Failed to read user") from e
        return self._to_domain(doc) if doc else None

    def find_many(self, skip: int = 0, limit: int = 10) -> UserPage:
        """List users newest first with the total count."""
        try:
            total = self.collection.count_documents({})
            docs = (
                self.collection.find({})
                .sort('created_at', -1)
                .skip(skip)
                .limit(limit)
            )
            users = [self._to_domain(doc) for doc in docs]
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise StorageError("Failed to list users") from e

        logger.debug("Listed users", extra={"count": len(users), "total": total})
        return UserPage(items=users, total=total)
