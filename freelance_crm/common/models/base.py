"""Base data models.

Records (`Client`, `Project`) mirror the rows of the hosted store and are
validated once, when a store adapter hands them over. Drafts carry the
user-editable fields of an insert or update and apply the form rules.
"""
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ProjectStatus(str, Enum):
    PENDING = 'pending'        # Angebot / noch nicht gestartet
    ONGOING = 'ongoing'        # Laufendes Projekt
    COMPLETED = 'completed'    # Abgeschlossen


def normalize_tags(tags: Any) -> List[str]:
    """Strip, lower-case and de-duplicate tags, keeping first-seen order."""
    result: List[str] = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in result:
            result.append(tag)
    return result


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _to_decimal(value: Any) -> Any:
    # str() first so 0.1 stays Decimal('0.1') instead of its binary expansion
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _to_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if len(value) > 10:
            # "2026-01-01T00:00:00+00:00" → "2026-01-01"
            return value[:10]
    return value


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.startswith(('http://', 'https://')):
        raise ValueError('must be an http(s) URL')
    return value


def _fill_updated_at(data: Any) -> Any:
    if isinstance(data, dict) and not data.get('updated_at') and data.get('created_at'):
        data = dict(data)
        data['updated_at'] = data['created_at']
    return data


class Client(BaseModel):
    """Kunde/Auftraggeber as returned by the store."""
    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: Optional[str] = None
    upwork_profile_url: Optional[str] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode='before')
    @classmethod
    def _default_updated_at(cls, data):
        return _fill_updated_at(data)

    @field_validator('id', mode='before')
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v

    @field_validator(
        'phone', 'upwork_profile_url', 'company_name', 'company_website', 'notes',
        mode='before',
    )
    @classmethod
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator('tags', mode='before')
    @classmethod
    def _normalize_tags(cls, v):
        return normalize_tags(v)

    @property
    def first_name(self) -> str:
        parts = self.full_name.split()
        return parts[0] if parts else 'Unknown'


class Project(BaseModel):
    """Projekt as returned by the store. Always owned by exactly one client."""
    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal('0'), ge=0, decimal_places=2)  # whole cents
    deadline: Optional[date] = None
    status: ProjectStatus = ProjectStatus.PENDING
    store_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode='before')
    @classmethod
    def _default_updated_at(cls, data):
        return _fill_updated_at(data)

    @field_validator('id', 'client_id', mode='before')
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v

    @field_validator('description', 'store_url', 'notes', mode='before')
    @classmethod
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator('price', mode='before')
    @classmethod
    def _price_decimal(cls, v):
        return _to_decimal(v)

    @field_validator('deadline', mode='before')
    @classmethod
    def _deadline_date(cls, v):
        return _to_date(v)

    @field_validator('price')
    @classmethod
    def _price_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError('price must be a finite amount')
        return v


# ---------------------------------------------------------------------------
# Drafts (insert / update payloads)
# ---------------------------------------------------------------------------

class ClientDraft(BaseModel):
    """Editable client fields, validated like the client form."""

    full_name: str = Field(min_length=2)
    email: str
    phone: Optional[str] = None
    upwork_profile_url: Optional[str] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator('full_name', 'email', mode='before')
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('email')
    @classmethod
    def _valid_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError('Invalid email address')
        return v

    @field_validator(
        'phone', 'upwork_profile_url', 'company_name', 'company_website', 'notes',
        mode='before',
    )
    @classmethod
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator('upwork_profile_url', 'company_website')
    @classmethod
    def _valid_url(cls, v):
        return _check_url(v)

    @field_validator('tags', mode='before')
    @classmethod
    def _normalize_tags(cls, v):
        return normalize_tags(v)

    def to_row(self) -> dict:
        """JSON-safe column mapping for the store."""
        return self.model_dump(mode='json')


class ProjectDraft(BaseModel):
    """Editable project fields, validated like the project form."""

    client_id: str = Field(min_length=1)
    title: str = Field(min_length=2)
    description: Optional[str] = None
    price: Decimal = Field(default=Decimal('0'), ge=0, decimal_places=2)  # whole cents
    deadline: Optional[date] = None
    status: ProjectStatus = ProjectStatus.PENDING
    store_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('client_id', 'title', mode='before')
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('description', 'store_url', 'notes', mode='before')
    @classmethod
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator('price', mode='before')
    @classmethod
    def _price_decimal(cls, v):
        return _to_decimal(v)

    @field_validator('deadline', mode='before')
    @classmethod
    def _deadline_date(cls, v):
        return _to_date(v)

    @field_validator('store_url')
    @classmethod
    def _valid_url(cls, v):
        return _check_url(v)

    def to_row(self) -> dict:
        """JSON-safe column mapping for the store."""
        return self.model_dump(mode='json')
