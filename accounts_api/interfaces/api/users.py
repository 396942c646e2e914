"""User API routes — create, paginated list, fetch, update, soft delete."""

from fastapi import APIRouter, Depends, Query, Request, status

from accounts_api.application.services.user_service import (
    create_user,
    get_user,
    get_users,
    remove_user,
    update_user,
)
from accounts_api.domain.models.user import User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.domain.schemas.common import ApiResponse, DeleteResult, UpdateResult
from accounts_api.domain.schemas.user import PageMeta, UserCreate, UserPage, UserRead, UserUpdate
from accounts_api.interfaces.api.deps import get_current_user
from accounts_api.interfaces.deps import get_user_repository

router = APIRouter(prefix="/api/v1/user", tags=["User"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserRead],
    summary="Create a new user",
    responses={400: {"description": "Bad Request"}, 409: {"description": "Email already exists"}},
)
async def create(
    body: UserCreate,
    repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    created = await create_user(repo, body, user)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        message="User created successfully",
        data=UserRead.from_user(created),
    )


@router.get(
    "",
    response_model=ApiResponse[UserPage],
    summary="Get all users with pagination",
    responses={400: {"description": "Invalid query parameters"}},
)
async def list_users(
    request: Request,
    current: int = Query(1, description="Current page number"),
    page_size: int = Query(0, alias="pageSize", description="Number of items per page"),
    repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    """Remaining query parameters become filters, e.g. `age>=18&sort=-createdAt&populate=role`."""
    page = await get_users(repo, current, page_size, request.url.query)
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        message="Fetch user with paginate",
        data=UserPage(
            meta=PageMeta(**page["meta"]),
            result=[UserRead.from_user(u) for u in page["result"]],
        ),
    )


@router.get(
    "/{id}",
    response_model=ApiResponse[UserRead],
    summary="Get user by id",
    responses={400: {"description": "Invalid id"}, 404: {"description": "User not found"}},
)
async def find_one(
    id: str,
    repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    found = await get_user(repo, id)
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        message="Fetch user by id",
        data=UserRead.from_user(found),
    )


@router.patch(
    "/{id}",
    response_model=ApiResponse[UpdateResult],
    summary="Update user by id",
    responses={400: {"description": "Invalid update data"}},
)
async def update(
    id: str,
    body: UserUpdate,
    repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    result = await update_user(repo, id, body, user)
    return ApiResponse(status_code=status.HTTP_200_OK, message="Update user by id", data=result)


@router.delete(
    "/{id}",
    response_model=ApiResponse[DeleteResult],
    summary="Delete user by id",
)
async def remove(
    id: str,
    repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    result = await remove_user(repo, id, user)
    return ApiResponse(status_code=status.HTTP_200_OK, message="Delete user by id", data=result)
