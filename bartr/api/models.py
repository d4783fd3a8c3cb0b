"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation. Field names follow the
JSON the frontend sends (camelCase where it uses camelCase).
"""

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, StrictInt, StrictStr


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    email: str
    """The email the account was registered with."""
    password: str
    """The plaintext password provided for authentication."""


class UserData(BaseModel):
    """
    Represents the data needed to register a new user.
    """
    name: str = Field(..., min_length=1)
    """Display name."""
    email: str = Field(..., min_length=3)
    password: str


class ProfileDetails(BaseModel):
    """Full profile overwrite sent by the profile editor."""
    userId: UUID
    """Must be the authenticated user."""
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None
    offeredSkills: List[StrictStr] = Field(default_factory=list)
    neededSkills: List[StrictStr] = Field(default_factory=list)


class NeededSkills(BaseModel):
    skillsNeeded: List[StrictStr]


class SwipeDetails(BaseModel):
    """A like or skip on another member."""
    swipedUserId: Optional[UUID] = None
    direction: Literal["like", "skip"]


class NewRequest(BaseModel):
    receiverId: Optional[UUID] = None


class RequestAction(BaseModel):
    requestId: UUID
    action: Literal["accept", "reject"]


class NewMessage(BaseModel):
    """
    Represents a new chat message in a match.
    """
    message: str
    """The text content of the message."""


class ProjectSubmission(BaseModel):
    content: str
    """Description of / link to the completed work."""


class CheckoutRequest(BaseModel):
    amount: StrictInt = Field(..., gt=0)
    """Top-up amount in major currency units."""


class AiMatchResult(BaseModel):
    """One ranked provider returned by `/api/aiMatch`."""
    userId: str
    name: str
    bio: str = ""
    skills_offered: List[str] = Field(default_factory=list)
    relevance_score: float = Field(..., ge=1, le=10)
