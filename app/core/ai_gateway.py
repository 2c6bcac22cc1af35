"""AI proxy action dispatch.

Accepts ``{action, payload}``, runs the matching chain and always answers
with ``{success, data | error}`` plus an HTTP status code. Nothing raised by
a chain escapes this module.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from app.chains import (
    compliance_check,
    generate_knowledge_checklist,
    generate_sop_steps,
    ingest_knowledge,
    knowledge_interview,
    ping,
    recommend_sops,
)
from app.core.errors import ActionInputError
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import PARSE_FAILURE_MESSAGE, AIAction, AIProxyResponse

logger = get_logger(__name__)

ActionHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

ACTION_HANDLERS: dict[str, ActionHandler] = {
    AIAction.RECOMMEND_SOPS.value: recommend_sops.run,
    AIAction.GENERATE_SOP_STEPS.value: generate_sop_steps.run,
    AIAction.COMPLIANCE_CHECK.value: compliance_check.run,
    AIAction.KNOWLEDGE_INTERVIEW.value: knowledge_interview.run,
    AIAction.GENERATE_KNOWLEDGE_CHECKLIST.value: generate_knowledge_checklist.run,
    AIAction.INGEST_KNOWLEDGE.value: ingest_knowledge.run,
    AIAction.TEST.value: ping.run,
}


async def dispatch(action: str | None, payload: dict[str, Any] | None) -> tuple[int, AIProxyResponse]:
    """
    Run one AI proxy action.

    Args:
        action: Action name (see AIAction)
        payload: Action-specific payload; None is treated as empty

    Returns:
        (http_status, response envelope)
    """
    if not action:
        return 400, AIProxyResponse(success=False, error="Missing action")

    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        return 400, AIProxyResponse(success=False, error=f"Unknown action: {action}")

    log_event(logger, logging.INFO, "ai_gateway_action_start", action=action)
    try:
        data = await handler(payload or {})
    except ActionInputError as e:
        log_event(logger, logging.WARNING, "ai_gateway_bad_request", action=action, message=str(e))
        return 400, AIProxyResponse(success=False, error=str(e))
    except json.JSONDecodeError as e:
        log_event(logger, logging.ERROR, "ai_gateway_parse_error", action=action, message=str(e))
        return 500, AIProxyResponse(success=False, error=PARSE_FAILURE_MESSAGE)
    except Exception as e:
        logger.exception("ai_gateway_action_error")
        return 500, AIProxyResponse(success=False, error=str(e))

    # Chains may parse a bare array or scalar out of the model reply
    if not isinstance(data, dict):
        log_event(
            logger,
            logging.ERROR,
            "ai_gateway_parse_error",
            action=action,
            message=f"Expected a JSON object, got {type(data).__name__}",
        )
        return 500, AIProxyResponse(success=False, error=PARSE_FAILURE_MESSAGE)

    log_event(logger, logging.INFO, "ai_gateway_action_success", action=action)
    return 200, AIProxyResponse(success=True, data=data)
