"""
estate_kernel.store -- Persistent store adapters for the canonical Database.

The kernel treats the store as one opaque key-value slot; these adapters
only encode and move the whole aggregate.
"""
