"""
Salon Booking Backend — Registration & Login Routes
======================================================

What:  POST /register and POST /login.
How:   `create_router(hasher, token_issuer)` builds the router around the
       credential collaborators it is given. bcrypt work runs in the thread
       pool so a slow hash never blocks other requests.

Responses:
    201 /register → {"message", "user": {id, firstName, lastName, email, accessToken}}
    200 /login    → same projection, carrying the token issued at registration
    400           → validation_error | duplicate_user | invalid_credentials
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from salon.database import get_db_session
from salon.exceptions import InvalidCredentialsError
from salon.schemas.common import ErrorResponse
from salon.schemas.user import (
    AuthenticatedUser,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
)
from salon.services.credentials import PasswordHasher, TokenIssuer
from salon.services.user_store import UserStore

logger = logging.getLogger(__name__)


def create_router(hasher: PasswordHasher, token_issuer: TokenIssuer) -> APIRouter:
    router = APIRouter(tags=["Accounts"])

    @router.post(
        "/register",
        status_code=201,
        response_model=AuthResponse,
        responses={
            400: {"description": "Invalid input or email/phone already registered", "model": ErrorResponse},
            429: {"description": "Too many attempts from this address", "model": ErrorResponse},
        },
        summary="Register a new user",
    )
    async def register(
        body: RegisterRequest,
        db: AsyncSession = Depends(get_db_session),
    ) -> AuthResponse:
        """
        Creates a user and returns its access token.

        The token is issued here, once; nothing rotates it afterwards.
        """
        password_hash = await run_in_threadpool(hasher.hash, body.password)
        user = await UserStore(db).create(
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            mobile_phone=body.mobile_phone,
            password_hash=password_hash,
            access_token=token_issuer.issue(),
        )
        return AuthResponse(
            message="User created",
            user=AuthenticatedUser.model_validate(user),
        )

    @router.post(
        "/login",
        response_model=AuthResponse,
        responses={
            400: {"description": "Credentials do not match", "model": ErrorResponse},
            429: {"description": "Too many attempts from this address", "model": ErrorResponse},
        },
        summary="Log in with email and password",
    )
    async def login(
        body: LoginRequest,
        db: AsyncSession = Depends(get_db_session),
    ) -> AuthResponse:
        """
        Verifies the password and returns the user's existing token.

        Unknown email and wrong password raise the same InvalidCredentialsError,
        and both spend one bcrypt verification.
        """
        user = await UserStore(db).get_by_email(body.email)
        if user is None:
            await run_in_threadpool(hasher.verify_dummy, body.password)
            raise InvalidCredentialsError(context={"reason": "unknown_email"})

        if not await run_in_threadpool(hasher.verify, body.password, user.password_hash):
            raise InvalidCredentialsError(context={"reason": "wrong_password", "user_id": str(user.id)})

        logger.info("User %s logged in", user.id)
        return AuthResponse(
            message="Logged in",
            user=AuthenticatedUser.model_validate(user),
        )

    return router
