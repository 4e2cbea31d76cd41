"""User models and registration request validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import CamelModel, SpiceParameters

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class UserPreferences(CamelModel):
    """Spice preferences and shop lists of a user."""
    spice_parameters: SpiceParameters = Field(default_factory=SpiceParameters)
    favorite_shops: List[str] = Field(default_factory=list, description="Shop IDs")
    dislikes: List[str] = Field(default_factory=list, description="Shop IDs")


class User(CamelModel):
    """A registered user profile."""
    id: str
    username: str
    email: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    is_public: bool = True
    created_at: Optional[datetime] = None


class CreateUserRequest(CamelModel):
    """Request model for user registration."""
    username: str = Field(..., min_length=3, max_length=100, pattern=USERNAME_PATTERN)
    email: str = Field(..., min_length=1, max_length=255, pattern=EMAIL_PATTERN)
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    bio: Optional[str] = Field(None, max_length=10000)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    is_public: bool = True
