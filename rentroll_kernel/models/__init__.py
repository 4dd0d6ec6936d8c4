"""ORM models for the rent-roll store."""

from rentroll_kernel.models.facility import Facility
from rentroll_kernel.models.rental_contract import RentalContract
from rentroll_kernel.models.rental_invoice import RentalInvoice
from rentroll_kernel.models.tenant import Tenant
from rentroll_kernel.models.unit import Unit

__all__ = [
    "Facility",
    "Unit",
    "Tenant",
    "RentalContract",
    "RentalInvoice",
]
