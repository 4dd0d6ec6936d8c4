"""
Rent-roll Kernel

Persistence, logging and error foundations for the rent-roll reconciler:
- SQLAlchemy declarative models for facilities, units, tenants,
  rental contracts and rental invoices
- Engine / session management with commit-or-rollback scopes
- Structured JSON logging
- Typed exception hierarchy
"""

__version__ = "0.1.0"
