"""
Tenant resolution: email match first, then name (plus phone when supplied).

Existing tenants have their names refreshed; email and phone are only ever
overwritten by a present, different value, never erased.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rentroll_kernel.logging_config import get_logger
from rentroll_kernel.models.tenant import Tenant

from rentroll_ingestion.domain.keys import TenantKey
from rentroll_ingestion.reconcilers.base import UpsertResult, find_one, upsert

logger = get_logger("ingestion.reconcilers.tenant")


class TenantResolver:
    """Find-or-create tenants by email or name. Entity type: tenant."""

    entity_type: str = "tenant"

    def find(self, session: Session, key: TenantKey) -> Tenant | None:
        if key.email:
            by_email = find_one(session, Tenant, Tenant.email == key.email)
            if by_email is not None:
                return by_email

        criteria = [
            Tenant.first_name == key.first_name,
            Tenant.last_name == key.last_name,
        ]
        if key.phone:
            criteria.append(Tenant.phone == key.phone)
        return find_one(
            session,
            Tenant,
            *criteria,
            order_by=(Tenant.created_at, Tenant.id),
        )

    def resolve(self, session: Session, key: TenantKey) -> UpsertResult[Tenant]:
        changes: dict[str, Any] = {
            "first_name": key.first_name,
            "last_name": key.last_name,
        }
        if key.email:
            changes["email"] = key.email
        if key.phone:
            changes["phone"] = key.phone

        result = upsert(
            session,
            self.find(session, key),
            create=lambda: Tenant(
                first_name=key.first_name,
                last_name=key.last_name,
                email=key.email,
                phone=key.phone,
            ),
            changes=lambda tenant: changes,
        )
        if result.created:
            logger.info(
                "tenant_created",
                extra={"tenant_id": str(result.instance.id), "has_email": key.email is not None},
            )
        elif result.updated:
            logger.info(
                "tenant_updated",
                extra={
                    "tenant_id": str(result.instance.id),
                    "changed_fields": list(result.changed_fields),
                },
            )
        return result
