"""
rentroll_ingestion -- Reconciles unit-inventory and rent-roll files into the
rent-roll store.

Normalizes noisy source fields into natural keys, upserts facilities, units,
tenants, rental contracts and invoices, keeps each contract's balance equal to
the sum of its invoice balances, and runs each source file as one atomic
transaction.

Architecture:
    rentroll_ingestion/ sits above rentroll_kernel/ (models, db, logging,
    exceptions). Nothing in the kernel imports from ingestion.
"""
