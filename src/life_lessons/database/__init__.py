"""
# Database Package

The `life_lessons.database` package is the **persistence layer** of the application, built on
**Motor** (async MongoDB driver).

- **`manager`**: the `DatabaseManager` that owns the connection pool and indexes.

The manager is created in the FastAPI lifespan and injected into handlers, so there is
exactly one pool per process without a module-level singleton.

```python
from life_lessons.database import DatabaseManager, LESSONS_COLLECTION

manager = DatabaseManager(settings)
await manager.connect()
lesson = await manager.get_collection(LESSONS_COLLECTION).find_one({"_id": lesson_id})
await manager.disconnect()
```
"""

from life_lessons.database.manager import CONTRIBUTORS_COLLECTION, LESSONS_COLLECTION, DatabaseManager

__all__ = ["CONTRIBUTORS_COLLECTION", "DatabaseManager", "LESSONS_COLLECTION"]
