"""
Organization and Property Models.

An organization is the tenant that owns claims; properties are the insured
structures claims are filed against.
"""

from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from claimflow.models.base import Base, TimeStampedModel, UUIDModel

if TYPE_CHECKING:
    from claimflow.models.claim import Claim


class Organization(Base, UUIDModel, TimeStampedModel):
    """Contractor organization (tenant)."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-safe organization identifier",
    )

    properties: Mapped[list["Property"]] = relationship(
        "Property",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    claims: Mapped[list["Claim"]] = relationship(
        "Claim",
        back_populates="organization",
    )

    def __repr__(self) -> str:
        return f"<Organization(slug={self.slug})>"


class Property(Base, UUIDModel, TimeStampedModel):
    """Insured property."""

    __tablename__ = "properties"

    org_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="properties",
    )
    claims: Mapped[list["Claim"]] = relationship(
        "Claim",
        back_populates="insured_property",
    )

    def __repr__(self) -> str:
        return f"<Property(street={self.street})>"
