"""
# Life Lessons API

A **FastAPI-based content-sharing backend** for short "life lessons". Users publish lessons,
other users view, like, save and share them, and discussions happen in a two-level comment
thread (comment → reply) that lives inside each lesson document.

## Architecture Overview

```
┌─────────────────────────────────────────────────────────────┐
│                  Life Lessons Architecture                   │
├─────────────────────────────────────────────────────────────┤
│  ┌──────────────┐  ┌──────────────┐  ┌──────────────┐       │
│  │   FastAPI    │  │   Routers    │  │  Middleware  │       │
│  │  (Core App)  │◄─┤  (lessons,   │◄─┤ (CORS, Auth, │       │
│  │              │  │ contributors,│  │  Timeouts)   │       │
│  └──────┬───────┘  │  payments)   │  └──────────────┘       │
│         │          └──────────────┘                          │
│         ├──► Services Layer (one store call per operation)  │
│         ├──► Managers Layer (identity, logging)             │
│         └──► Database Layer (Motor / MongoDB)               │
├─────────────────────────────────────────────────────────────┤
│  ┌──────────┐  ┌────────────────────┐  ┌────────────────┐   │
│  │ MongoDB  │  │ Identity provider  │  │ Razorpay links │   │
│  └──────────┘  └────────────────────┘  └────────────────┘   │
└─────────────────────────────────────────────────────────────┘
```

## Key Technologies

- **FastAPI**: async web framework with dependency injection and OpenAPI docs
- **Motor**: async MongoDB driver
- **Pydantic / pydantic-settings**: request models and configuration
- **python-jose**: bearer token verification
- **Razorpay**: hosted payment links for premium lessons
- **Prometheus**: request metrics via `prometheus-fastapi-instrumentator`

Attributes:
    __version__ (str): Package version.
    __description__ (str): Brief package description.
    settings (Settings): Re-exported global configuration singleton from `config.py`.
"""

__version__ = "1.0.0"

# Re-export commonly used objects for convenience
from life_lessons.config import settings

__description__ = "A FastAPI backend for sharing life lessons"
