"""
# Database Management Module

This module provides the **MongoDB infrastructure** for the Life Lessons API. The
`DatabaseManager` class owns the Motor client, its connection pool and the index setup.

## Architecture Overview

```
┌─────────────────────────────────────────────────────────────┐
│   ┌──────────────┐      ┌───────────────────────────────┐   │
│   │   Services   │─────▶│        DatabaseManager        │   │
│   │ (per request)│      │   (one per running process)   │   │
│   └──────────────┘      └──────────────┬────────────────┘   │
│                                        │                    │
│                         ┌──────────────▼──────────────┐     │
│                         │      Connection Pool        │     │
│                         │  (Motor/PyMongo Internal)   │     │
│                         └─────────────────────────────┘     │
└─────────────────────────────────────────────────────────────┘
```

## Lifecycle

The manager is **constructed explicitly** in the application lifespan, stored on
`app.state.db_manager` and handed to request handlers through the `get_db_manager`
dependency. Nothing captures it from module scope.

1. **Instantiation**: `DatabaseManager(settings)`, no I/O.
2. **Connection**: `connect()` creates the pool and pings (retries with exponential backoff).
3. **Indexes**: `create_indexes()` verifies the indexes the queries rely on.
4. **Operations**: `get_collection()` returns Motor collections.
5. **Shutdown**: `disconnect()` closes every pooled socket.

## Atomicity

All nested comment/reply mutations are single `update_one` calls filtered on both the
lesson `_id` and `comments._id`, so MongoDB's per-document atomicity is the only
concurrency control needed.

## Usage

```python
manager = DatabaseManager(settings)
await manager.connect()
lessons = manager.get_collection(LESSONS_COLLECTION)
await manager.disconnect()
```
"""

import asyncio
import time
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from life_lessons.config import Settings
from life_lessons.managers.logging_manager import get_logger

LESSONS_COLLECTION = "lessons"
CONTRIBUTORS_COLLECTION = "contributors"

db_logger = get_logger(name="database", prefix="[DATABASE]")
perf_logger = get_logger(name="database", prefix="[DB_PERFORMANCE]")
health_logger = get_logger(name="database", prefix="[DB_HEALTH]")


class DatabaseManager:
    """
    Manages the MongoDB connection, collections and indexes.

    Attributes:
        settings (`Settings`): Configuration the manager was built from.
        client (`Optional[AsyncIOMotorClient]`): The Motor client. `None` until `connect()`.
        database (`Optional[AsyncIOMotorDatabase]`): The selected database. `None` until
            `connect()`.

    Warning:
        Always call `connect()` before using collections and `disconnect()` during
        shutdown to prevent connection leaks.
    """

    def __init__(self, settings: Settings, connection_retries: int = 3):
        self.settings = settings
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_retries = connection_retries

    def _connection_string(self) -> str:
        if self.settings.MONGODB_USERNAME and self.settings.MONGODB_PASSWORD:
            password = self.settings.MONGODB_PASSWORD.get_secret_value()
            scheme, _, rest = self.settings.MONGODB_URL.partition("://")
            db_logger.debug("Using authenticated connection to MongoDB")
            return f"{scheme}://{self.settings.MONGODB_USERNAME}:{password}@{rest}"
        db_logger.debug("Using unauthenticated connection to MongoDB")
        return self.settings.MONGODB_URL

    async def connect(self) -> None:
        """
        Establish the MongoDB connection with exponential backoff retry logic.

        Up to `connection_retries` attempts are made, waiting 1s, 2s, 4s... between them.

        Raises:
            `ServerSelectionTimeoutError`: If MongoDB is unreachable after all attempts.
            `ConnectionFailure`: If authentication fails on the last attempt.
        """
        if self.client is not None:
            return

        start_time = time.time()
        db_logger.info("Starting MongoDB connection process")

        for attempt in range(self._connection_retries):
            attempt_start = time.time()
            try:
                db_logger.info("Connection attempt %d/%d to MongoDB", attempt + 1, self._connection_retries)
                db_logger.info(
                    "MongoDB connection config - Database: %s, MaxPool: %d, MinPool: %d, ServerTimeout: %dms, ConnTimeout: %dms",
                    self.settings.MONGODB_DATABASE,
                    self.settings.MONGODB_MAX_POOL_SIZE,
                    self.settings.MONGODB_MIN_POOL_SIZE,
                    self.settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    self.settings.MONGODB_CONNECTION_TIMEOUT,
                )

                client = AsyncIOMotorClient(
                    self._connection_string(),
                    serverSelectionTimeoutMS=self.settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    connectTimeoutMS=self.settings.MONGODB_CONNECTION_TIMEOUT,
                    socketTimeoutMS=self.settings.MONGODB_SOCKET_TIMEOUT,
                    maxPoolSize=self.settings.MONGODB_MAX_POOL_SIZE,
                    minPoolSize=self.settings.MONGODB_MIN_POOL_SIZE,
                )

                ping_start = time.time()
                await client.admin.command("ping")
                ping_duration = time.time() - ping_start

                self.client = client
                self.database = client[self.settings.MONGODB_DATABASE]

                perf_logger.info(
                    "MongoDB connection established in %.3fs (ping: %.3fs)", time.time() - start_time, ping_duration
                )
                db_logger.info("Successfully connected to MongoDB database: %s", self.settings.MONGODB_DATABASE)
                return

            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                perf_logger.warning("Connection attempt %d failed after %.3fs", attempt + 1, time.time() - attempt_start)
                db_logger.warning(
                    "Failed to connect to MongoDB (attempt %d/%d): %s", attempt + 1, self._connection_retries, e
                )
                if attempt == self._connection_retries - 1:
                    db_logger.error("All connection attempts failed after %.3fs", time.time() - start_time)
                    raise

                backoff_time = 2**attempt
                db_logger.info("Waiting %.1fs before retry (exponential backoff)", backoff_time)
                await asyncio.sleep(backoff_time)

    async def disconnect(self) -> None:
        """Close the Motor client and release every pooled connection. Safe when not connected."""
        if self.client is None:
            db_logger.warning("Disconnect called but no active MongoDB connection found")
            return

        start_time = time.time()
        self.client.close()
        self.client = None
        self.database = None
        perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
        db_logger.info("Successfully disconnected from MongoDB")

    async def health_check(self) -> bool:
        """
        Ping MongoDB.

        Returns:
            `bool`: `True` if the database answered the ping, `False` otherwise. Never raises.
        """
        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False

        start_time = time.time()
        try:
            await self.client.admin.command("ping")
        except (ServerSelectionTimeoutError, ConnectionFailure, ConnectionError, TimeoutError) as e:
            health_logger.error("Database health check failed: %s", e)
            return False

        perf_logger.debug("Database health check completed in %.3fs", time.time() - start_time)
        return True

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Retrieve a MongoDB collection by name.

        Raises:
            `ConnectionError`: If `connect()` has not been called.
        """
        if self.database is None:
            raise ConnectionError("Database not connected. Call connect() first.")
        return self.database[collection_name]

    async def create_indexes(self) -> None:
        """
        Create the indexes the lesson and contributor queries rely on.

        - `lessons.saves` (desc) for the top-saved listing
        - `lessons.author` for contributor lookups
        - `lessons.comments._id` for positional comment updates
        - `contributors.name` (unique) for the authorship upsert
        - `contributors.lessons` (desc) for the leaderboard
        """
        start_time = time.time()
        lessons = self.get_collection(LESSONS_COLLECTION)
        await lessons.create_index([("saves", DESCENDING)])
        await lessons.create_index([("author", ASCENDING)])
        await lessons.create_index([("comments._id", ASCENDING)])

        contributors = self.get_collection(CONTRIBUTORS_COLLECTION)
        await contributors.create_index([("name", ASCENDING)], unique=True)
        await contributors.create_index([("lessons", DESCENDING)])

        perf_logger.info("Database indexes verified in %.3fs", time.time() - start_time)
