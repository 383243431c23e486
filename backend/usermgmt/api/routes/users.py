from fastapi import APIRouter, Depends, status
from usermgmt.api.dependencies import get_current_claims, get_user_service
from usermgmt.services.user_service import UserService
from usermgmt.types import (
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    TokenClaims,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])

# Domain errors raised below are turned into responses by the handlers in main.py
# Handlers that hash passwords or hit the database are sync so they run in the threadpool


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: CreateUserRequest,
    service: UserService = Depends(get_user_service),
):
    """Register a new user"""
    return service.create(user_data)


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """Login and get access token"""
    return service.login(credentials)


@router.get("/validate", response_model=TokenClaims)
async def validate(claims: TokenClaims = Depends(get_current_claims)):
    """Echo the claims of a valid bearer token"""
    return claims


@router.get("/profile", response_model=UserResponse)
def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
):
    """Get current user information"""
    return service.resolve_by_username(claims.username)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    user_data: UpdateUserRequest,
    claims: TokenClaims = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
):
    """Replace the current user's profile"""
    return service.update(claims.username, user_data)


@router.delete("/profile", response_model=UserResponse)
def delete_profile(
    claims: TokenClaims = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
):
    """Soft-delete the current user's account"""
    return service.delete(claims.username)
