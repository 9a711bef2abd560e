"""
Episode Studio exception taxonomy

- InputValidationError: malformed input to a pure step or to the workflow
- SchemaValidationError: model output did not match the declared schema
- ContractViolationError: a step produced data the next step cannot accept
- ExternalDependencyError: recipient directory or notification transport failed

The Notification Dispatcher converts ExternalDependencyError into a reported
DeliveryResult; everything else propagates to the caller.
"""

from typing import Optional


# Reason code reported when a recipient has no usable delivery channel
MISSING_RECIPIENT_CHANNEL = "MissingRecipientChannel"


class EpisodeStudioError(Exception):
    """Base class for all Episode Studio errors"""


class InputValidationError(EpisodeStudioError):
    """Raised when input to a step is missing required fields or malformed"""

    def __init__(self, message: str, errors: Optional[list] = None):
        self.errors = errors or []
        super().__init__(message)


class SchemaValidationError(EpisodeStudioError):
    """Raised when generated output does not satisfy the requested schema"""

    def __init__(self, schema_name: str, message: str, raw_output: Optional[str] = None):
        self.schema_name = schema_name
        self.raw_output = raw_output
        super().__init__(f"{schema_name}: {message}")


class ContractViolationError(EpisodeStudioError):
    """Raised when a step's output fails the contract at a step boundary"""

    def __init__(self, step_id: str, contract: str, message: str):
        self.step_id = step_id
        self.contract = contract
        super().__init__(f"Step '{step_id}' violated {contract}: {message}")


class ExternalDependencyError(EpisodeStudioError):
    """Raised by the recipient directory and notification transports"""

    def __init__(self, dependency: str, message: str, status_code: Optional[int] = None):
        self.dependency = dependency
        self.status_code = status_code
        super().__init__(f"{dependency}: {message}")
