"""
API v1 routes.

Defines REST endpoints for sign-up, verification and user administration.
"""

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.routing import APIRoute

from src.api.dependencies import get_admin_service, get_signup_service, require_admin
from src.api.models import (
    ErrorResponse,
    OperationStatus,
    OperationStatusResponse,
    SignUpRequest,
    SignUpViewResponse,
    UserPageResponse,
    UserResponse,
)
from src.config.settings import get_settings
from src.domain.admin import UserAdminService
from src.domain.exceptions import ConflictError, NotFoundError, ValidationError
from src.domain.ports import VerifyResult
from src.domain.signup import SignUpService

logger = logging.getLogger(__name__)

USERNAME_OR_EMAIL_EXISTS = "Username or email already exists"
INVALID_TOKEN = "Invalid token"
ACCOUNT_EXISTS = "Account already verified"


class BadRequestRoute(APIRoute):
    """
    Route that answers malformed input with 400.

    FastAPI reports request validation failures as 422; this API treats
    them like any other invalid input.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as e:
                logger.debug("Rejected malformed request to %s", request.url.path)
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={
                        "detail": [
                            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                            for err in e.errors()
                        ]
                    },
                )

        return route_handler


router = APIRouter(tags=["v1"], route_class=BadRequestRoute)


@router.post(
    "/users",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        201: {"description": "User created; Location header references the new user"},
        400: {"description": "Username or email already exists, or malformed input"},
    },
    summary="Register a new user",
    description="Submit username, email and password to begin registration. "
    "A verification link will be sent to the provided email.",
)
def create_user(
    request_data: SignUpRequest,
    request: Request,
    service: SignUpService = Depends(get_signup_service),
) -> Response:
    """
    Register a new (disabled) user and send the verification email.

    - **username**: 3-50 characters, unique
    - **email**: Valid email address, unique
    - **password**: Password (minimum 8 characters)
    """
    try:
        user = service.register(request_data.username, request_data.email, request_data.password)
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=USERNAME_OR_EMAIL_EXISTS,
        ) from None
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    location = str(request.url_for("get_user", public_id=user.public_id))
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": location})


@router.post(
    "/users/sign-up/verify",
    response_model=None,
    responses={
        303: {"description": "Account verified; redirect to the profile page"},
        400: {"model": SignUpViewResponse, "description": "Verification failed"},
    },
    summary="Complete sign-up with the emailed token",
    description="Follow the link from the verification email. "
    "The token is the encrypted, URL-safe value from the link.",
)
def complete_sign_up(
    token: str = Query("", description="Token from the verification link"),
    service: SignUpService = Depends(get_signup_service),
) -> Response:
    """
    Verify the token and enable the account.

    Token failures (expired, bad signature, malformed, no longer current,
    unknown user) all produce the same generic message. A missing token is
    rejected the same way.
    """
    outcome = service.verify(token)

    if outcome.result == VerifyResult.SUCCESS:
        return RedirectResponse(get_settings().profile_url, status_code=status.HTTP_303_SEE_OTHER)

    if outcome.result == VerifyResult.ALREADY_VERIFIED:
        error = ACCOUNT_EXISTS
    else:
        error = INVALID_TOKEN
    logger.debug("Sign-up %s: %s", outcome.state.value, outcome.result.value)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=SignUpViewResponse(error=error).model_dump(),
    )


@router.get(
    "/users",
    response_model=UserPageResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="List users",
    description="Page through all users. Requires administrator credentials.",
)
def get_users(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(20, ge=1, le=100, description="Page size"),
    _admin: str = Depends(require_admin),
    service: UserAdminService = Depends(get_admin_service),
) -> UserPageResponse:
    result = service.list_users(page=page, size=size)
    return UserPageResponse(
        items=[UserResponse.from_user(u) for u in result.items],
        page=result.page,
        size=result.size,
        total=result.total,
        total_pages=result.total_pages,
    )


@router.get(
    "/users/{public_id}",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Get a user",
)
def get_user(
    public_id: str,
    _admin: str = Depends(require_admin),
    service: UserAdminService = Depends(get_admin_service),
) -> UserResponse:
    try:
        user = service.get_user(public_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from None
    return UserResponse.from_user(user)


@router.put(
    "/users/{public_id}/enable",
    response_model=OperationStatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Enable a user",
)
def enable_user(
    public_id: str,
    _admin: str = Depends(require_admin),
    service: UserAdminService = Depends(get_admin_service),
) -> OperationStatusResponse:
    user = service.enable_user(public_id)
    return OperationStatusResponse(
        status=OperationStatus.FAILURE if user is None else OperationStatus.SUCCESS
    )


@router.put(
    "/users/{public_id}/disable",
    response_model=OperationStatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Disable a user",
)
def disable_user(
    public_id: str,
    _admin: str = Depends(require_admin),
    service: UserAdminService = Depends(get_admin_service),
) -> OperationStatusResponse:
    user = service.disable_user(public_id)
    return OperationStatusResponse(
        status=OperationStatus.FAILURE if user is None else OperationStatus.SUCCESS
    )


@router.delete(
    "/users/{public_id}",
    response_model=OperationStatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Delete a user",
)
def delete_user(
    public_id: str,
    _admin: str = Depends(require_admin),
    service: UserAdminService = Depends(get_admin_service),
) -> OperationStatusResponse:
    deleted = service.delete_user(public_id)
    return OperationStatusResponse(
        status=OperationStatus.SUCCESS if deleted else OperationStatus.FAILURE
    )
