"""Pydantic models and resource definitions for offers, invitations and protocols."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar
from urllib.parse import urlparse

from pydantic import field_validator

from app.api.contracts import CamelModel

DATE_PATTERN = re.compile(r"^(\d{4})/(\d{2})/(\d{2})$")
DATE_FORMAT_MESSAGE = "Invalid date format. Expected YYYY/MM/DD (e.g. 2025/03/28)!"


def _check_date(value: str) -> str:
    match = DATE_PATTERN.match(value)
    if not match:
        raise ValueError(DATE_FORMAT_MESSAGE)
    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError as exc:
        raise ValueError(DATE_FORMAT_MESSAGE) from exc
    return value


def _check_url(value: str) -> str:
    parsed = urlparse(value.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Invalid file URL!")
    return value.strip()


class TitledFields(CamelModel):
    """Fields shared by every document resource."""

    label: ClassVar[str] = "Document"

    title: str

    @field_validator("title")
    @classmethod
    def _validate_title(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError(f"{cls.label} title should be at least 3 characters long!")
        return value


class FileUrlMixin(CamelModel):
    """``fileUrl`` supplied directly in a JSON body."""

    file_url: str

    @field_validator("file_url")
    @classmethod
    def _validate_file_url(cls, value: str) -> str:
        return _check_url(value)


class StoredDocumentMixin(CamelModel):
    """Fields assigned by the store."""

    id: str
    file_url: str
    created_at: datetime


class OfferFields(TitledFields):
    """Offer fields accepted from clients, except the file URL."""

    label: ClassVar[str] = "Offer"

    company: str
    price: float

    @field_validator("company")
    @classmethod
    def _validate_company(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Company name should be at least 2 characters long!")
        return value

    @field_validator("price")
    @classmethod
    def _validate_price(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError("Price must be a positive number!")
        return value


class OfferCreate(OfferFields, FileUrlMixin):
    """Offer JSON body."""


class OfferResponse(OfferFields, StoredDocumentMixin):
    """Offer as returned by the API."""


class DatedFields(TitledFields):
    """Title plus a ``YYYY/MM/DD`` calendar date."""

    date: str

    @field_validator("date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        return _check_date(value.strip())


class InvitationFields(DatedFields):
    """Invitation fields accepted from clients, except the file URL."""

    label: ClassVar[str] = "Invite"


class InvitationCreate(InvitationFields, FileUrlMixin):
    """Invitation JSON body."""


class InvitationResponse(InvitationFields, StoredDocumentMixin):
    """Invitation as returned by the API."""


class ProtocolFields(DatedFields):
    """Protocol fields accepted from clients, except the file URL."""

    label: ClassVar[str] = "Protocol"


class ProtocolCreate(ProtocolFields, FileUrlMixin):
    """Protocol JSON body."""


class ProtocolResponse(ProtocolFields, StoredDocumentMixin):
    """Protocol as returned by the API."""


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything that differs between the three document resources."""

    name: str
    label: str
    collection: str
    fields_model: type[TitledFields]
    create_model: type[CamelModel]
    response_model: type[CamelModel]

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found!"


@dataclass(frozen=True)
class UploadedFile:
    """File part received from a multipart request."""

    filename: str
    content_type: str
    content: bytes


OFFERS = ResourceDefinition(
    name="offers",
    label="Offer",
    collection="offers",
    fields_model=OfferFields,
    create_model=OfferCreate,
    response_model=OfferResponse,
)
INVITATIONS = ResourceDefinition(
    name="invitations",
    label="Invite",
    collection="invitations",
    fields_model=InvitationFields,
    create_model=InvitationCreate,
    response_model=InvitationResponse,
)
PROTOCOLS = ResourceDefinition(
    name="protocols",
    label="Protocol",
    collection="protocols",
    fields_model=ProtocolFields,
    create_model=ProtocolCreate,
    response_model=ProtocolResponse,
)

RESOURCES: tuple[ResourceDefinition, ...] = (OFFERS, INVITATIONS, PROTOCOLS)
