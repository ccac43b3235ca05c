import logging
from contextlib import contextmanager
from typing import Annotated, Iterator, List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from users_api.errors import EmailConflictError, UserNotFoundError
from users_api.schemas import (
    CreateUserRequest,
    ErrorResponse,
    HealthResponse,
    MAX_INT64,
    MessageResponse,
    UpdateUserRequest,
    UserOut,
)
from users_api.service import UserService

logger = logging.getLogger(__name__)

SERVICE_NAME = "users-api"

router = APIRouter(prefix="/users", tags=["users"])
health_router = APIRouter(tags=["health"])

UserId = Annotated[int, Path(ge=0, le=MAX_INT64, description="User identifier")]

_bad_request = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}
_not_found = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
_conflict = {status.HTTP_409_CONFLICT: {"model": ErrorResponse}}
_server_error = {status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}}


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


@contextmanager
def translate_errors() -> Iterator[None]:
    """Turn service failures into HTTP errors with an ``error`` body."""
    try:
        yield
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except EmailConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists") from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected error while handling user request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        ) from e


@health_router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    return HealthResponse(status="ok", service=SERVICE_NAME)


@router.get("", response_model=List[UserOut], responses={**_server_error})
def get_users(service: UserService = Depends(get_user_service)):
    with translate_errors():
        return service.get_all_users()


@router.get("/{user_id}", response_model=UserOut, responses={**_bad_request, **_not_found, **_server_error})
def get_user(user_id: UserId, service: UserService = Depends(get_user_service)):
    with translate_errors():
        return service.get_user_by_id(user_id)


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    responses={**_bad_request, **_conflict, **_server_error},
)
def create_user(payload: CreateUserRequest, service: UserService = Depends(get_user_service)):
    with translate_errors():
        return service.create_user(payload)


@router.put(
    "/{user_id}",
    response_model=UserOut,
    responses={**_bad_request, **_not_found, **_conflict, **_server_error},
)
def update_user(
    payload: UpdateUserRequest,
    user_id: UserId,
    service: UserService = Depends(get_user_service),
):
    with translate_errors():
        return service.update_user(user_id, payload)


@router.delete("/{user_id}", response_model=MessageResponse, responses={**_bad_request, **_not_found, **_server_error})
def delete_user(user_id: UserId, service: UserService = Depends(get_user_service)):
    with translate_errors():
        service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
