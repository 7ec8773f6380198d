"""
Typed exception hierarchy for the estate kernel.

===============================================================================
WHAT RAISES AND WHAT DOES NOT
===============================================================================

Data problems found in spreadsheets or CRUD payloads are NOT exceptions.
They are collected as ``ValidationError`` / ``RowError`` / ``IntegrityError``
values and returned inside result objects.

Exceptions are reserved for hard failures of a single call:

    EstateKernelError (base)
    |
    +-- DependencyUnavailableError   optional parser (openpyxl) not installed
    |
    +-- StoreError
    |   +-- StoreCorruptedError      persisted blob cannot be decoded
    |
    +-- ConfigError
        +-- InvalidConfigError       YAML config missing keys / bad values

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|------------------------------------
Dependency   | DEPENDENCY_UNAVAILABLE    | Workbook parser library missing
Store        | STORE_CORRUPTED           | Stored payload is not a Database
Config       | INVALID_CONFIG            | Config file fails schema checks

Every class carries a ``code`` class attribute (machine-readable) and keeps
its context as attributes, so structured logging can serialize it.
"""


class EstateKernelError(Exception):
    """
    Base exception for all estate kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ESTATE_KERNEL_ERROR"


class DependencyUnavailableError(EstateKernelError):
    """A required external parser is not installed."""

    code: str = "DEPENDENCY_UNAVAILABLE"

    def __init__(self, dependency: str, purpose: str):
        self.dependency = dependency
        self.purpose = purpose
        super().__init__(
            f"{purpose} requires {dependency}. Install with: pip install {dependency}"
        )


# Store-related exceptions


class StoreError(EstateKernelError):
    """Base exception for persistent store errors."""

    code: str = "STORE_ERROR"


class StoreCorruptedError(StoreError):
    """The persisted payload under the storage key cannot be decoded."""

    code: str = "STORE_CORRUPTED"

    def __init__(self, storage_key: str, reason: str):
        self.storage_key = storage_key
        self.reason = reason
        super().__init__(f"Stored database under {storage_key!r} is unreadable: {reason}")


# Config-related exceptions


class ConfigError(EstateKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidConfigError(ConfigError):
    """Configuration file is missing required keys or holds invalid values."""

    code: str = "INVALID_CONFIG"

    def __init__(self, source: str, problem: str):
        self.source = source
        self.problem = problem
        super().__init__(f"Invalid configuration in {source}: {problem}")
