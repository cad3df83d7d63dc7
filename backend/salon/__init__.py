"""
Salon Booking Backend — Application Package
============================================

Layout:

    ┌─────────────────────────────────────┐
    │     Routes (API Layer, routers)     │  ← HTTP shape, status codes
    ├─────────────────────────────────────┤
    │  Services (stores, auth, catalog)   │  ← persistence rules, credentials
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (async sessions)       │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
