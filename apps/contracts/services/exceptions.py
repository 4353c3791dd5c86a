"""
Domain-specific exceptions for contracts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ContractsServiceError(Exception):
    """Base exception for all contracts service errors."""
    pass


class ContractNotFoundError(ContractsServiceError):
    """Raised when a contract does not exist."""
    pass


class ContractTemplateNotFoundError(ContractsServiceError):
    """Raised when a trip has no saved contract template."""
    pass


class ContractAccessError(ContractsServiceError):
    """Raised when a user acts on a contract of someone else's child."""
    pass


class ContractAlreadyAcceptedError(ContractsServiceError):
    """Raised when a parent accepts a contract twice."""
    pass


class EmptyContractTemplateError(ContractsServiceError):
    """Raised when saving a template with no text."""
    pass


class ContractTripNotFoundError(ContractsServiceError):
    """Raised when the trip of a contract template does not exist."""
    pass
