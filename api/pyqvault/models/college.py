from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String

from ..config.database import Base

COLLEGE_TYPES = ("Government", "Private", "Autonomous", "government", "private", "autonomous")
COLLEGE_CATEGORIES = (
    "Technical", "Medical", "Management", "University",
    "Research Institute", "Design", "Fashion/Design",
)

CollegeType = Literal["Government", "Private", "Autonomous", "government", "private", "autonomous"]
CollegeCategory = Literal[
    "Technical", "Medical", "Management", "University",
    "Research Institute", "Design", "Fashion/Design",
]

REQUIRED_COLLEGE_FIELDS = ("name", "code", "address", "city", "state", "type")
# API fields backed by NOT NULL columns; an update may omit them but not null them
NON_NULLABLE_COLLEGE_FIELDS = (
    "name", "code", "city", "state", "type", "courses", "branches", "status", "isActive",
)


class College(Base):
    __tablename__ = "colleges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    short_name = Column(String, nullable=True)
    code = Column(String, nullable=False, unique=True, index=True)  # stored upper-case
    address = Column(String, nullable=True)
    location = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False, index=True)
    website = Column(String, nullable=True)
    established_year = Column(Integer, nullable=True)
    type = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True)
    affiliation = Column(String, nullable=True)
    courses = Column(JSON, nullable=False, default=list)
    branches = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="active")
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "shortName": self.short_name,
            "code": self.code,
            "address": self.address,
            "location": self.location,
            "city": self.city,
            "state": self.state,
            "website": self.website,
            "establishedYear": self.established_year,
            "type": self.type,
            "category": self.category,
            "affiliation": self.affiliation,
            "courses": self.courses or [],
            "branches": self.branches or [],
            "status": self.status,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class CollegeBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    shortName: Optional[str] = None
    code: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    website: Optional[str] = None
    establishedYear: Optional[int] = None
    type: Optional[CollegeType] = None
    category: Optional[CollegeCategory] = None
    affiliation: Optional[str] = None
    courses: Optional[List[str]] = None
    branches: Optional[List[str]] = None
    status: Optional[Literal["active", "inactive"]] = None
    isActive: Optional[bool] = None

    @field_validator("establishedYear")
    @classmethod
    def check_established_year(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        current_year = datetime.utcnow().year
        if value < 1800 or value > current_year:
            raise ValueError(f"establishedYear must be between 1800 and {current_year}")
        return value

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @field_validator("courses", "branches")
    @classmethod
    def strip_items(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return [item.strip() for item in value if item and item.strip()]


class CollegeCreate(CollegeBase):
    pass


class CollegeUpdate(CollegeBase):
    id: Optional[int] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "CollegeUpdate":
        nulled = [
            field for field in NON_NULLABLE_COLLEGE_FIELDS
            if field in self.model_fields_set and getattr(self, field) is None
        ]
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class CollegeImportRequest(BaseModel):
    # Checked by the handler so a non-list gets the import-specific message
    colleges: Optional[Any] = None


# camelCase API field -> ORM column
COLLEGE_FIELD_MAP = {
    "name": "name",
    "shortName": "short_name",
    "code": "code",
    "address": "address",
    "location": "location",
    "city": "city",
    "state": "state",
    "website": "website",
    "establishedYear": "established_year",
    "type": "type",
    "category": "category",
    "affiliation": "affiliation",
    "courses": "courses",
    "branches": "branches",
    "status": "status",
    "isActive": "is_active",
}
