# Routes package init
"""
Salon Booking Backend — API Routes Package
=============================================

Route Inventory:
    - accounts.py:   POST /register, POST /login
    - treatments.py: GET  /treatments
    - bookings.py:   POST /booktreatment, GET /bookedtreatment  (token required)
    - users.py:      GET  /userinfo                              (token required)
    - health.py:     GET  /health

Routes stay thin: parse the request, call a store or collaborator, shape the
response. Each module exposes `create_router(...)` taking what it depends on.
"""

from fastapi import APIRouter

from salon.config import Settings
from salon.routes import accounts, bookings, health, treatments, users
from salon.services.credentials import PasswordHasher, TokenIssuer


def build_api_router(
    hasher: PasswordHasher,
    token_issuer: TokenIssuer,
    settings: Settings,
) -> APIRouter:
    """Assembles every route module into one router."""
    router = APIRouter()
    router.include_router(health.create_router())
    router.include_router(treatments.create_router())
    router.include_router(accounts.create_router(hasher, token_issuer))
    router.include_router(bookings.create_router(settings.allow_double_booking))
    router.include_router(users.create_router())
    return router
