"""Domain-specific exceptions for Retail Core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from RetailCoreError for easy catching.
"""


class RetailCoreError(Exception):
    """Base exception for all Retail Core errors.

    This is the base class for all domain-specific exceptions in the package.
    Users can catch this exception to handle any Retail Core error.
    """

    pass


class ConfigError(RetailCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided (e.g. an unknown mode)
    - An unknown report name is requested
    """

    pass


class SchemaError(RetailCoreError):
    """Raised when a structural precondition on the fact table is violated.

    This exception is raised when:
    - Required columns are missing from input data
    - A derived column already exists with an incompatible type
    - The fact table has not been enriched with the current schema version
    """

    pass


class DataError(RetailCoreError):
    """Raised when a required field is null or out of its domain.

    This exception is raised when:
    - transaction_date or transaction_time is null
    - customer_rating is outside [0, 10]
    - invoice_id is duplicated or a money column is negative
    - A raw value cannot be parsed into its column type
    """

    pass
