"""Repository adapters - Credential store implementations."""

from .memory import InMemoryIdentityRepository, InMemoryMagicLinkTokenRepository
from .postgres import PostgresIdentityRepository, PostgresMagicLinkTokenRepository, run_migrations

__all__ = [
    "InMemoryIdentityRepository",
    "InMemoryMagicLinkTokenRepository",
    "PostgresIdentityRepository",
    "PostgresMagicLinkTokenRepository",
    "run_migrations",
]
