"""
Module: rentroll_kernel.models.tenant
Responsibility: ORM persistence for tenants (people renting units).

Matching is done by the ingestion layer (email first, then name + phone);
the table itself carries no uniqueness constraint because neither key is
guaranteed to be present.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentroll_kernel.db.base import TimestampedBase

if TYPE_CHECKING:
    from rentroll_kernel.models.rental_contract import RentalContract


class Tenant(TimestampedBase):
    """A tenant. email and phone are optional and never erased by imports."""

    __tablename__ = "tenant"
    __table_args__ = (
        Index("idx_tenant_email", "email"),
        Index("idx_tenant_name", "last_name", "first_name"),
    )

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    rental_contracts: Mapped[list["RentalContract"]] = relationship(back_populates="tenant")

    def __repr__(self) -> str:
        return f"<Tenant {self.first_name} {self.last_name}>"
