"""
Exceptions for the Fabric reservation audit.

AuditPreconditionError and its subclasses end the run with exit code 1.
ManagementCommandError is recoverable and is handled where the call is made.
"""


class AuditPreconditionError(Exception):
    """Raised when the audit cannot run at all."""


class AzureCliNotFoundError(AuditPreconditionError):
    """Raised when the az executable cannot be located"""

    def __init__(self):
        super().__init__("Azure CLI ('az') not found")


class NotAuthenticatedError(AuditPreconditionError):
    """Raised when there is no usable az login session"""

    def __init__(self, detail: str = ""):
        message = "Not signed in to the Azure CLI"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NoSubscriptionsError(AuditPreconditionError):
    """Raised when no subscription can be scanned"""

    def __init__(self, detail: str = "no enabled subscriptions are visible to this account"):
        super().__init__(
            f"No subscriptions to scan ({detail}). "
            "Ask for at least Reader access on one subscription and sign in again."
        )


class ConfigurationError(AuditPreconditionError):
    """Raised when a setting from the environment or command line is invalid"""


class ManagementCommandError(RuntimeError):
    """Raised by a backend when a single management call fails"""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
