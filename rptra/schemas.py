"""
Pydantic schemas for request bodies and responses.

Each write payload is validated here before it reaches the database, and
every failing field is reported back to the client at once.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

from rptra.date_utils import parse_datetime

YOUTUBE_EMBED_PATTERN = re.compile(r"^https://www\.youtube\.com/embed/[a-zA-Z0-9_-]{11}$")
DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
PHONE_PATTERN = re.compile(r"^(\+62|0)[0-9]{9,12}$")
BCRYPT_MAX_BYTES = 72


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    FINISHED = "finished"


class GalleryStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class RequestStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class UsageArea(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    UNSPECIFIED = ""


class ContactCategory(str, Enum):
    INFORMASI = "informasi"
    PENDAFTARAN = "pendaftaran"
    SARAN = "saran"
    KERJASAMA = "kerjasama"
    KELUHAN = "keluhan"
    LAINNYA = "lainnya"


class VisitPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# ---------------------------------------------------------------------------
# Reusable field types


def _not_blank(value: str, info: ValidationInfo) -> str:
    if not value:
        raise PydanticCustomError(
            "blank", "Field {field} is required", {"field": info.field_name}
        )
    return value


def _image_ids(value: list[str]) -> list[str]:
    if any(not item for item in value):
        raise PydanticCustomError(
            "image_ids", "images harus array ID GridFS yang valid"
        )
    return value


def _stored_file_id(value: str) -> str:
    if value and not ObjectId.is_valid(value):
        raise PydanticCustomError("file_id", "Gambar harus ID GridFS yang valid")
    return value


def _calendar_date(value: Any) -> datetime:
    parsed = parse_datetime(value)
    if parsed is None:
        raise PydanticCustomError("date", "Tanggal tidak valid")
    return parsed


def _count(value: Any) -> int:
    # Visitor counts arrive as numbers or numeric strings; anything else is 0.
    if isinstance(value, bool):
        return int(value)
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def _bcrypt_password(value: Optional[str]) -> Optional[str]:
    # bcrypt only hashes the first 72 bytes and newer releases refuse longer input.
    if value and len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise PydanticCustomError("password_length", "Password maksimal 72 byte")
    return value


RequiredText = Annotated[str, AfterValidator(_not_blank)]
ImageIds = Annotated[list[str], AfterValidator(_image_ids)]
FileId = Annotated[str, AfterValidator(_stored_file_id)]
CalendarDate = Annotated[datetime, BeforeValidator(_calendar_date)]
VisitorCount = Annotated[int, BeforeValidator(_count)]
BcryptText = Annotated[str, AfterValidator(_bcrypt_password)]
Password = Annotated[str, AfterValidator(_not_blank), AfterValidator(_bcrypt_password)]


class Payload(BaseModel):
    """Base for request bodies: strings are trimmed, unknown keys dropped."""

    model_config = ConfigDict(
        str_strip_whitespace=True, extra="ignore", use_enum_values=True
    )

    def changes(self) -> dict:
        """Fields the client actually sent, ready for a ``$set``."""
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})

    def document(self) -> dict:
        return self.model_dump(exclude={"id"})


# ---------------------------------------------------------------------------
# Auth and admin accounts


class LoginPayload(Payload):
    email: RequiredText
    password: RequiredText


class AdminCreate(Payload):
    username: RequiredText
    email: EmailStr
    password: Password
    role: AdminRole


class AdminUpdate(Payload):
    username: RequiredText
    email: EmailStr
    role: AdminRole
    password: Optional[BcryptText] = None


class AdminOut(BaseModel):
    id: str
    username: str
    email: str
    role: AdminRole
    lastLogin: Optional[str] = None
    createdAt: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: AdminOut
    message: str = "Login berhasil"
    token: str


class VerifyResponse(BaseModel):
    valid: bool
    user: Optional[AdminOut] = None


# ---------------------------------------------------------------------------
# Content


class NewsCreate(Payload):
    title: RequiredText
    subtitle: Optional[str] = None
    content: RequiredText
    category: Optional[str] = None
    author: Optional[str] = None
    featured: bool = False
    published: bool = True
    tags: list[str] = Field(default_factory=list)
    images: ImageIds = Field(default_factory=list)


class NewsUpdate(Payload):
    title: Optional[RequiredText] = None
    subtitle: Optional[str] = None
    content: Optional[RequiredText] = None
    category: Optional[str] = None
    author: Optional[str] = None
    featured: Optional[bool] = None
    published: Optional[bool] = None
    tags: Optional[list[str]] = None
    images: Optional[ImageIds] = None


class EventCreate(Payload):
    title: RequiredText
    description: str = ""
    category: RequiredText
    date: RequiredText
    location: RequiredText
    status: EventStatus = EventStatus.UPCOMING
    images: ImageIds = Field(default_factory=list)


class EventUpdate(Payload):
    title: Optional[RequiredText] = None
    description: Optional[str] = None
    category: Optional[RequiredText] = None
    date: Optional[RequiredText] = None
    location: Optional[RequiredText] = None
    status: Optional[EventStatus] = None
    images: Optional[ImageIds] = None


class GalleryCreate(Payload):
    title: RequiredText
    description: Optional[str] = None
    date: CalendarDate
    category: RequiredText
    status: GalleryStatus = GalleryStatus.DRAFT
    images: ImageIds = Field(default_factory=list)


class GalleryUpdate(Payload):
    title: Optional[RequiredText] = None
    description: Optional[str] = None
    date: Optional[CalendarDate] = None
    category: Optional[RequiredText] = None
    status: Optional[GalleryStatus] = None
    images: Optional[ImageIds] = None


class VideoPayload(Payload):
    titleVidio: str
    deskripsi: Optional[str] = None
    date: str
    youtubeUrl: str

    @field_validator("titleVidio")
    @classmethod
    def _check_title(cls, value: str) -> str:
        if len(value) < 5:
            raise PydanticCustomError("title_length", "Judul minimal 5 karakter")
        if len(value) > 100:
            raise PydanticCustomError("title_length", "Judul maksimal 100 karakter")
        return value

    @field_validator("deskripsi")
    @classmethod
    def _check_description(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) > 500:
            raise PydanticCustomError("description_length", "Deskripsi maksimal 500 karakter")
        return value or None

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not DATE_ONLY_PATTERN.match(value):
            raise PydanticCustomError("date_format", "Format tanggal harus YYYY-MM-DD")
        return value

    @field_validator("youtubeUrl")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not YOUTUBE_EMBED_PATTERN.match(value):
            raise PydanticCustomError(
                "youtube_url", "URL YouTube tidak valid, harus dalam format embed"
            )
        return value


class ContactCreate(Payload):
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    category: ContactCategory
    message: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) < 2:
            raise PydanticCustomError("name_length", "Nama minimal 2 karakter")
        if len(value) > 100:
            raise PydanticCustomError("name_length", "Nama maksimal 100 karakter")
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if len(value) > 100:
            raise PydanticCustomError("email_length", "Email maksimal 100 karakter")
        if not EMAIL_PATTERN.match(value):
            raise PydanticCustomError("email_format", "Email tidak valid")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if len(value) > 15 or not PHONE_PATTERN.match(value):
            raise PydanticCustomError(
                "phone_format", "Nomor telepon tidak valid (contoh: 08xxxxxxxxxx)"
            )
        return value

    @field_validator("subject")
    @classmethod
    def _check_subject(cls, value: str) -> str:
        if len(value) < 3:
            raise PydanticCustomError("subject_length", "Subjek minimal 3 karakter")
        if len(value) > 100:
            raise PydanticCustomError("subject_length", "Subjek maksimal 100 karakter")
        return value

    @field_validator("message")
    @classmethod
    def _check_message(cls, value: str) -> str:
        if len(value) < 10:
            raise PydanticCustomError("message_length", "Pesan minimal 10 karakter")
        if len(value) > 1000:
            raise PydanticCustomError("message_length", "Pesan maksimal 1000 karakter")
        return value


# ---------------------------------------------------------------------------
# Visitor bookings and analytics


class RequestCreate(Payload):
    tanggalPelaksanaan: RequiredText
    namaPeminjam: RequiredText
    namaInstansi: RequiredText
    alamat: RequiredText
    noTelp: RequiredText
    jumlahPeserta: int
    waktuPenggunaan: RequiredText
    penggunaanRuangan: bool
    tujuanPenggunaan: UsageArea
    status: RequestStatus = RequestStatus.PENDING


class RequestUpdate(Payload):
    id: Optional[str] = None
    tanggalPelaksanaan: Optional[RequiredText] = None
    namaPeminjam: Optional[RequiredText] = None
    namaInstansi: Optional[RequiredText] = None
    alamat: Optional[RequiredText] = None
    noTelp: Optional[RequiredText] = None
    jumlahPeserta: Optional[int] = None
    waktuPenggunaan: Optional[RequiredText] = None
    penggunaanRuangan: Optional[bool] = None
    tujuanPenggunaan: Optional[UsageArea] = None
    status: Optional[RequestStatus] = None


class IdPayload(Payload):
    id: RequiredText


class VisitPayload(Payload):
    date: CalendarDate
    balita: VisitorCount = 0
    anak: VisitorCount = 0
    remaja: VisitorCount = 0
    dewasa: VisitorCount = 0
    lansia: VisitorCount = 0


AGE_BRACKETS = ("balita", "anak", "remaja", "dewasa", "lansia")


class PeriodTotals(BaseModel):
    start: str
    end: str
    total: int
    days: int
    brackets: dict[str, int]


class VisitSummary(BaseModel):
    period: VisitPeriod
    label: str
    current: PeriodTotals
    previous: PeriodTotals
    change: int
    changePercent: int


# ---------------------------------------------------------------------------
# Singletons


class OperationalUpdate(Payload):
    status: bool
    updatedBy: Optional[str] = None
    updatedByEmail: Optional[str] = None


class TitledText(BaseModel):
    title: RequiredText
    description: RequiredText


class Mission(TitledText):
    image: FileId = ""


class NamedItem(BaseModel):
    name: str
    description: str = ""


class Programs(TitledText):
    items: list[NamedItem] = Field(default_factory=list)


class Facilities(TitledText):
    items: list[NamedItem] = Field(default_factory=list)
    images: list[FileId] = Field(default_factory=list)

    @field_validator("images")
    @classmethod
    def _limit_images(cls, value: list[str]) -> list[str]:
        if len(value) > 4:
            raise PydanticCustomError("too_many_images", "Maksimal 4 gambar fasilitas")
        return value


class Partner(BaseModel):
    name: str
    role: str


class Collaborations(TitledText):
    partners: list[Partner] = Field(default_factory=list)


class OpeningHours(BaseModel):
    senin: str
    selasa: str
    rabu: str
    kamis: str
    jumat: str
    sabtu: str
    minggu: str


class OperationalHours(BaseModel):
    title: RequiredText
    hours: OpeningHours


class AboutPayload(Payload):
    title: RequiredText
    subtitle: RequiredText
    mission: Mission
    vision: Mission
    values: TitledText
    programs: Programs
    facilities: Facilities
    collaborations: Collaborations
    operational: OperationalHours
    establishedYear: RequiredText
    establishedText: RequiredText
