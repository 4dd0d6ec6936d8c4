"""
Pure domain helpers for the kernel.

NO dependencies on ORM, database or I/O.
"""

from rentroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
