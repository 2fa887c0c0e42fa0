from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.database import get_database
from app.core.exceptions import NotFound
from app.models.auth.user import UserLogin, UserUpdate, RoleUpdate
from app.services.auth.user_service import UserService
from app.routes.auth.dependencies import get_token_email, require_admin
from app.utils.response import success_response
from app.utils.serializers import serialize_document, serialize_documents

router = APIRouter(tags=["Users"])


@router.post("/user")
async def save_user(
    body: UserLogin,
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Create the user on first login or refresh last_login"""
    user = await UserService(db).upsert_on_login(email, body)
    return success_response(
        message="User saved successfully",
        data={"user": serialize_document(user)}
    )


@router.get("/user/role")
async def get_user_role(
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    role = await UserService(db).get_role(email)
    return success_response(message="Role retrieved successfully", data={"role": role})


@router.get("/user/profile")
async def get_profile(
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    user = await UserService(db).get_user_by_email(email)
    if not user:
        raise NotFound("User not found")
    return success_response(
        message="Profile retrieved successfully",
        data={"user": serialize_document(user)}
    )


@router.patch("/user/profile")
async def update_profile(
    body: UserUpdate,
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Update name, photo and bio"""
    user = await UserService(db).update_profile(email, body)
    return success_response(
        message="Profile updated successfully",
        data={"user": serialize_document(user)}
    )


@router.post("/become-creator")
async def become_creator(
    email: str = Depends(get_token_email),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Ask an admin for the contestCreator role"""
    request_doc = await UserService(db).request_creator_role(email)
    return success_response(
        message="Creator request submitted",
        data={"request": serialize_document(request_doc)},
        status_code=201
    )


@router.get("/creator-requests")
async def get_creator_requests(
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    requests = await UserService(db).get_creator_requests()
    return success_response(
        message="Creator requests retrieved successfully",
        data={"requests": serialize_documents(requests)}
    )


@router.get("/users")
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    users, pagination = await UserService(db).get_users(page=page, limit=limit)
    return success_response(
        message="Users retrieved successfully",
        data={"users": serialize_documents(users), "pagination": pagination}
    )


@router.patch("/update-role")
async def update_role(
    body: RoleUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Change a user's role; clears any pending creator request"""
    user = await UserService(db).update_role(body.email, body.role, current_user["email"])
    return success_response(
        message="Role updated successfully",
        data={"user": serialize_document(user)}
    )
