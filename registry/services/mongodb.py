# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer for resident records and profile status rows.
"""

import os
import logging
from datetime import datetime, timezone
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    PyMongoError
)
from bson import ObjectId
from bson.errors import InvalidId

from models.enums import ProfileStatusCode

logger = logging.getLogger(__name__)

RESIDENTS_COLLECTION = "residents"
STATUS_COLLECTION = "resident_profile_status"


class PersistenceError(Exception):
    """Raised when a read or write against the registry store fails."""
    pass


class ResidentNotFoundError(PersistenceError):
    """Raised when a resident record does not exist."""
    pass


def _stringify_ids(document: Dict) -> Dict:
    """Expose _id as a string id and ObjectId references as strings."""
    if "_id" in document:
        document["id"] = str(document["_id"])
        del document["_id"]
    if isinstance(document.get("resident_id"), ObjectId):
        document["resident_id"] = str(document["resident_id"])
    return document


class MongoDBService:
    """MongoDB service for the resident registry with connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/barangay_registry_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'barangay_registry_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise PersistenceError(f"Failed to connect to MongoDB: {e}") from e

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def _validate_object_id(self, doc_id: str) -> ObjectId:
        """Validate and convert string ID to ObjectId."""
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")

    def _build_resident_pipeline(
        self,
        status: Optional[ProfileStatusCode] = None,
        resident_id: Optional[ObjectId] = None
    ) -> List[Dict]:
        """Build the residents-with-status aggregation pipeline."""
        pipeline: List[Dict] = []

        if resident_id is not None:
            pipeline.append({"$match": {"_id": resident_id}})

        pipeline.append({
            "$lookup": {
                "from": STATUS_COLLECTION,
                "localField": "_id",
                "foreignField": "resident_id",
                "as": STATUS_COLLECTION
            }
        })

        if status is not None:
            status_match: Dict[str, Any] = {f"{STATUS_COLLECTION}.status": int(status)}
            if ProfileStatusCode(status) == ProfileStatusCode.PENDING:
                # No status row counts as pending
                status_match = {"$or": [status_match, {STATUS_COLLECTION: {"$size": 0}}]}
            pipeline.append({"$match": status_match})

        return pipeline

    def _format_resident(self, document: Dict) -> Dict:
        _stringify_ids(document)
        document[STATUS_COLLECTION] = [
            _stringify_ids(row) for row in document.get(STATUS_COLLECTION) or []
        ]
        return document

    # Resident reads

    def fetch_residents(self, status: Optional[ProfileStatusCode] = None) -> List[Dict]:
        """
        Fetch all resident documents joined with their status row.

        Args:
            status: Only return residents in this status (None for all)

        Returns:
            Raw resident documents, status row under "resident_profile_status"
        """
        try:
            pipeline = self._build_resident_pipeline(status=status)
            documents = list(self.get_collection(RESIDENTS_COLLECTION).aggregate(pipeline))
            documents = [self._format_resident(doc) for doc in documents]

            logger.debug(f"Fetched {len(documents)} residents (status filter: {status})")
            return documents

        except PyMongoError as e:
            logger.error(f"Failed to fetch residents: {e}")
            raise PersistenceError(f"Failed to fetch residents: {e}") from e

    def fetch_approved_residents(self) -> List[Dict]:
        """Fetch residents whose profile is approved."""
        return self.fetch_residents(status=ProfileStatusCode.APPROVED)

    def find_resident(self, resident_id: str) -> Optional[Dict]:
        """Find a single resident document with its status row."""
        try:
            object_id = self._validate_object_id(resident_id)
        except ValueError as e:
            logger.error(f"Invalid resident ID {resident_id}: {e}")
            return None

        try:
            pipeline = self._build_resident_pipeline(resident_id=object_id)
            documents = list(self.get_collection(RESIDENTS_COLLECTION).aggregate(pipeline))
        except PyMongoError as e:
            logger.error(f"Failed to find resident {resident_id}: {e}")
            raise PersistenceError(f"Failed to find resident {resident_id}: {e}") from e

        if not documents:
            logger.debug(f"Resident {resident_id} not found")
            return None

        return self._format_resident(documents[0])

    def count_status(self, status: ProfileStatusCode) -> int:
        """Count residents in a status; residents without a status row count as pending."""
        try:
            if ProfileStatusCode(status) == ProfileStatusCode.PENDING:
                pipeline = self._build_resident_pipeline(status=status) + [{"$count": "count"}]
                result = list(self.get_collection(RESIDENTS_COLLECTION).aggregate(pipeline))
                count = result[0]["count"] if result else 0
            else:
                count = self.get_collection(STATUS_COLLECTION).count_documents({"status": int(status)})
            logger.debug(f"Counted {count} profiles with status {int(status)}")
            return count
        except PyMongoError as e:
            logger.error(f"Failed to count status {int(status)}: {e}")
            raise PersistenceError(f"Failed to count profiles: {e}") from e

    # Status writes

    def update_status(
        self,
        resident_id: str,
        status: ProfileStatusCode,
        reason: Optional[str] = None,
        write_reason: bool = True
    ) -> datetime:
        """
        Write a resident's status row, creating it when missing.

        Args:
            resident_id: Resident record ID
            status: New status code
            reason: Reason text to store
            write_reason: When False the stored reason is left untouched

        Returns:
            The updated_at timestamp written
        """
        object_id = self._validate_object_id(resident_id)
        now = datetime.now(timezone.utc)

        updates: Dict[str, Any] = {
            "status": int(status),
            "updated_at": now
        }
        if write_reason:
            updates["rejection_reason"] = reason

        try:
            result = self.get_collection(STATUS_COLLECTION).update_one(
                {"resident_id": object_id},
                {
                    "$set": updates,
                    "$setOnInsert": {"created_at": now}
                },
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"Failed to update status for resident {resident_id}: {e}")
            raise PersistenceError(f"Failed to update profile status: {e}") from e

        if result.upserted_id is not None:
            logger.info(f"Created status row for resident {resident_id} with status {int(status)}")
        else:
            logger.info(f"Updated status for resident {resident_id} to {int(status)}")
        return now

    # Deletion

    def delete_status(self, resident_id: str) -> bool:
        """Delete a resident's status row."""
        object_id = self._validate_object_id(resident_id)
        try:
            result = self.get_collection(STATUS_COLLECTION).delete_one({"resident_id": object_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete status for resident {resident_id}: {e}")
            raise PersistenceError(f"Failed to delete resident status: {e}") from e

        if result.deleted_count > 0:
            logger.warning(f"Deleted status row for resident {resident_id}")
            return True
        logger.warning(f"No status row deleted for resident {resident_id}")
        return False

    def delete_resident(self, resident_id: str) -> bool:
        """Delete a resident record."""
        object_id = self._validate_object_id(resident_id)
        try:
            result = self.get_collection(RESIDENTS_COLLECTION).delete_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete resident {resident_id}: {e}")
            raise PersistenceError(f"Failed to delete resident: {e}") from e

        if result.deleted_count > 0:
            logger.warning(f"Deleted resident {resident_id}")
            return True
        logger.warning(f"No resident deleted for {resident_id}")
        return False

    # Change streams

    def watch(self, collection_name: str):
        """Open a change stream on a registry collection."""
        try:
            return self.get_collection(collection_name).watch()
        except PyMongoError as e:
            logger.error(f"Failed to open change stream on {collection_name}: {e}")
            raise PersistenceError(f"Failed to subscribe to {collection_name}: {e}") from e

    # Index Management

    def create_indexes(self) -> None:
        """Create indexes for the registry collections."""
        try:
            logger.info("Creating MongoDB indexes...")

            residents = self.get_collection(RESIDENTS_COLLECTION)
            residents.create_index("user_id", unique=True, sparse=True)

            statuses = self.get_collection(STATUS_COLLECTION)
            statuses.create_index("resident_id", unique=True)
            statuses.create_index([("status", ASCENDING), ("updated_at", ASCENDING)])

            logger.info("MongoDB indexes created successfully")

        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise PersistenceError(f"Failed to create indexes: {e}") from e


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
