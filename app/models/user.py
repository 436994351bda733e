from enum import Enum

from sqlmodel import Field, SQLModel


class UserProfile(str, Enum):
    PLEASURE_BOATER = "pleasure_boater"
    BOAT_MANAGER = "boat_manager"
    NAUTICAL_COMPANY = "nautical_company"
    CORPORATE = "corporate"


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    profile: str = Field(default=UserProfile.PLEASURE_BOATER.value, index=True)


class User(UserBase, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)


class UserPublic(SQLModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    profile: str
