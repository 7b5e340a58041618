"""
Bus Admin Backend — Application Package
=========================================

Administrative backend for bus records (name, route, stops, schedule, fare,
image) with admin authentication and image upload.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← BusService, AuthService, UploadStore
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   AppContext / Database (Wiring)    │  ← engine, sessions, settings
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
