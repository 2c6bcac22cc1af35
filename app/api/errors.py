"""Translation of service errors into HTTP responses."""

from fastapi import HTTPException, status

from app.core.errors import (
    AIProxyError,
    BuildGateError,
    KnowledgeInputError,
    KnowledgeStatusTransitionError,
    NotFoundError,
    OnboardingConflictError,
    OnboardingValidationError,
    WizardInputError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (OnboardingConflictError, status.HTTP_409_CONFLICT),
    (KnowledgeStatusTransitionError, status.HTTP_409_CONFLICT),
    (BuildGateError, status.HTTP_409_CONFLICT),
    (OnboardingValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (KnowledgeInputError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (WizardInputError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


def to_http_exception(e: Exception, event: str = "request_failed") -> HTTPException:
    """
    Map a service exception to an HTTPException.

    Failures of generative calls carry ``retryable: true``; unknown errors
    become 500 with the raw message.
    """
    if isinstance(e, AIProxyError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": e.user_message, "error": e.message, "retryable": True},
        )

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            retryable = isinstance(e, WizardInputError)
            return HTTPException(
                status_code=status_code,
                detail={"message": str(e), "retryable": retryable},
            )

    logger.exception(event)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
