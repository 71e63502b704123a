"""
Core exception classes for AWS Reservations.
"""


class ReservationError(Exception):
    """Base exception for all AWS Reservations errors."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(ReservationError):
    """Raised when configuration is invalid or missing."""
    pass


class UnknownPurchaseMethodError(ConfigurationError):
    """Raised when a ReservationPurchaseMethod tag holds an unexpected value."""

    def __init__(self, value: str):
        super().__init__(f"Unknown ReservationPurchaseMethod detected: {value}")
        self.value = value


class AuthenticationError(ReservationError):
    """Raised when AWS authentication fails."""
    pass


class ServiceError(ReservationError):
    """Raised when AWS service calls fail."""
    pass


class InvalidResourceError(ReservationError):
    """Raised when a resource returned by AWS lacks a required field."""
    pass


class OfferingNotFoundError(ReservationError):
    """Raised when no Savings Plans offering exists for an instance type."""

    def __init__(self, instance_type: str, resource_label: str):
        super().__init__(
            f"Savings Plans Offering is not found for {instance_type}: {resource_label}"
        )
        self.instance_type = instance_type
        self.resource_label = resource_label


class CalculationNotImplementedError(ReservationError, NotImplementedError):
    """Raised for resource combinations the calculation does not support."""
    pass
