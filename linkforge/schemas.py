import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from linkforge.utils import MAX_EXPIRATION_DAYS, create_short_url, normalize_tags

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkRecord(CamelModel):
    id: str = Field(default_factory=new_id)
    original_url: str
    short_code: str
    custom_alias: Optional[str] = None
    created_at: UTCDateTime = Field(default_factory=utcnow)
    expires_at: Optional[UTCDateTime] = None
    click_count: int = Field(0, ge=0)
    qr_code_scans: int = Field(0, ge=0)
    is_active: bool = True
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    @computed_field(alias="shortUrl")
    @property
    def short_url(self) -> str:
        return create_short_url(self.short_code)


class TopUrl(LinkRecord):
    total_engagement: int = 0


class ActivityType(str, Enum):
    CREATED = "created"
    CLICKED = "clicked"
    SCANNED = "scanned"


class ActivityLogEntry(CamelModel):
    id: str = Field(default_factory=new_id)
    type: ActivityType
    timestamp: UTCDateTime = Field(default_factory=utcnow)
    details: str
    url_id: Optional[str] = None

    @computed_field
    @property
    def label(self) -> str:
        from linkforge.analytics import format_activity_type
        return format_activity_type(self.type)


class QRCustomization(CamelModel):
    model_config = ConfigDict(frozen=True)

    size: int = Field(256, ge=64, le=2048)
    error_correction_level: Literal["L", "M", "Q", "H"] = "M"
    foreground_color: str = Field("#1F2937", pattern=HEX_COLOR)
    background_color: str = Field("#FFFFFF", pattern=HEX_COLOR)
    margin: int = Field(2, ge=0, le=20)


class QRCodeRecord(CamelModel):
    id: str = Field(default_factory=new_id)
    text: str
    data_url: str
    created_at: UTCDateTime = Field(default_factory=utcnow)
    scan_count: int = Field(0, ge=0)
    customization: QRCustomization = Field(default_factory=QRCustomization)
    url_id: Optional[str] = None


class ValidationResult(CamelModel):
    is_valid: bool
    is_safe: bool
    normalized_url: Optional[str] = None
    error: Optional[str] = None


class AnalyticsSummary(CamelModel):
    total_urls: int
    total_clicks: int
    total_qr_scans: int = Field(alias="totalQRScans")
    recent_activity: List[ActivityLogEntry]
    top_urls: List[TopUrl]


class LinkCreate(CamelModel):
    url: str
    custom_alias: Optional[str] = None
    expiration_days: Optional[int] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("custom_alias", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("expiration_days")
    @classmethod
    def check_expiration_days(cls, v):
        if v is not None and v < 0:
            raise ValueError("Expiration must be at least 1 day")
        if v is not None and v > MAX_EXPIRATION_DAYS:
            raise ValueError(f"Expiration cannot exceed {MAX_EXPIRATION_DAYS} days")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return normalize_tags(v)


class ShortenResponse(CamelModel):
    link: LinkRecord
    warning: Optional[str] = None


class UrlCheck(CamelModel):
    url: str


class QRCreate(CamelModel):
    text: str
    customization: QRCustomization = Field(default_factory=QRCustomization)


class AliasAvailability(CamelModel):
    alias: str
    available: bool


class Preferences(CamelModel):
    dark_mode: bool = False
