"""Domain exceptions raised by services and translated by the routers."""


class NotFoundError(Exception):
    """Row is missing, soft-deleted, or belongs to another organization."""


class OnboardingValidationError(Exception):
    """Onboarding or profile form failed validation."""


class OnboardingConflictError(Exception):
    """Caller already belongs to an organization."""


class KnowledgeStatusTransitionError(Exception):
    """Raised when a knowledge item status transition is invalid."""


class BuildGateError(Exception):
    """Required knowledge items are still pending."""


class ActionInputError(Exception):
    """AI proxy payload is missing a required field."""


class AIProxyError(Exception):
    """Base class for AI proxy failures surfaced to workflow callers."""

    user_message = "The AI request failed. Please try again."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AIProxyTransportError(AIProxyError):
    """The proxy could not be invoked (network, timeout, crash)."""


class AIProxyReportedError(AIProxyError):
    """The proxy answered with ``success: false``."""


class AIResponseShapeError(AIProxyError):
    """The proxy's ``data`` did not match the shape the caller relies on."""


class WizardInputError(Exception):
    """A wizard step cannot run because earlier input is missing."""


class KnowledgeInputError(Exception):
    """A checklist action does not fit the item (wrong type, missing value)."""
