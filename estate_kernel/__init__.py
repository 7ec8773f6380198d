"""
Estate Kernel

Pure domain core of the estate ledger:
- Row schemas with strict identity fields and lenient money fields
- Referential integrity (tenant -> property, capacity)
- Rent allocation and dashboard metrics over a store snapshot
- Canonical store serialization and persistent store adapters
"""

__version__ = "0.1.0"
