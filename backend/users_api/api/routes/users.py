from fastapi import APIRouter, Depends, status
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from datetime import datetime
from users_api.api.dependencies import get_user_service, guard_user_routes
from users_api.services.user_service import DB_INT_MAX, DB_INT_MIN, UserService, parse_user_id

router = APIRouter(prefix="/users", tags=["users"])


class LocationPayload(BaseModel):
    # Present and owned by the user -> update in place, otherwise insert
    id: Optional[int] = Field(default=None, ge=1, le=DB_INT_MAX)
    country: Optional[str] = None
    district: Optional[str] = None
    street: Optional[str] = None


class UserCreate(BaseModel):
    # name and password are checked by the service so a missing one is a 400
    name: Optional[str] = None
    salary: Optional[int] = Field(default=None, ge=DB_INT_MIN, le=DB_INT_MAX)
    status: Optional[bool] = None
    password: Optional[str] = None
    locations: Optional[List[LocationPayload]] = Field(default=None, alias="Location")

    model_config = ConfigDict(populate_by_name=True)


class UserUpdate(BaseModel):
    """Every field is optional; omitted fields keep their current value"""
    name: Optional[str] = None
    salary: Optional[int] = Field(default=None, ge=DB_INT_MIN, le=DB_INT_MAX)
    status: Optional[bool] = None
    password: Optional[str] = None
    locations: Optional[List[LocationPayload]] = Field(default=None, alias="Location")

    model_config = ConfigDict(populate_by_name=True)


class LocationResponse(BaseModel):
    id: int
    country: Optional[str]
    district: Optional[str]
    street: Optional[str]
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    # No password field: credentials are never serialized
    id: int
    name: str
    salary: Optional[int]
    status: Optional[bool]
    created_at: Optional[datetime]
    locations: List[LocationResponse] = Field(default_factory=list, serialization_alias="Location")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class UserEnvelope(BaseModel):
    message: str
    status: int
    data: UserResponse


class UserListEnvelope(BaseModel):
    message: str
    status: int
    data: List[UserResponse]


class MessageEnvelope(BaseModel):
    message: str
    status: int


@router.get("", response_model=UserListEnvelope, dependencies=[Depends(guard_user_routes)])
def list_users(service: UserService = Depends(get_user_service)):
    """List all users with their locations"""
    users = service.list_users()
    return UserListEnvelope(
        message="All data displayed",
        status=200,
        data=[UserResponse.model_validate(user) for user in users],
    )


@router.get("/{user_id}", response_model=UserEnvelope, dependencies=[Depends(guard_user_routes)])
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    """Get a user by id"""
    user = service.get_user(parse_user_id(user_id))
    return UserEnvelope(
        message="Required data displayed",
        status=200,
        data=UserResponse.model_validate(user),
    )


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, service: UserService = Depends(get_user_service)):
    """Create a user with optional locations and a password"""
    user = service.create_user(payload.model_dump(exclude_unset=True))
    return UserEnvelope(
        message="User, associated locations, and password added successfully",
        status=201,
        data=UserResponse.model_validate(user),
    )


@router.patch("/{user_id}", response_model=UserEnvelope, dependencies=[Depends(guard_user_routes)])
def update_user(
    user_id: str,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service)
):
    """Partially update a user, upserting locations by id"""
    user = service.update_user(
        parse_user_id(user_id), payload.model_dump(exclude_unset=True))
    return UserEnvelope(
        message="User, associated locations, and password updated successfully",
        status=200,
        data=UserResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageEnvelope, dependencies=[Depends(guard_user_routes)])
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    """Delete a user together with its locations and password"""
    service.delete_user(parse_user_id(user_id))
    return MessageEnvelope(
        message="User, associated locations, and password deleted successfully",
        status=200,
    )
