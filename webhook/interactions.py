"""
Interactions Webhook

FastAPI router that hands signed interaction requests to the dispatcher
and turns the dispatch outcome into an HTTP response.

Update Flow:
  webhook → dispatcher (verify → parse → route) → completion → response
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

from slash.dispatcher import DispatchOutcome, InteractionDispatcher, InteractionState
from transport.discord.security import SIGNATURE_HEADER, TIMESTAMP_HEADER

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_TIMEOUT = 3.0

_ERROR_RESPONSES = {
    InteractionState.MALFORMED: (status.HTTP_400_BAD_REQUEST, "Invalid interaction payload"),
    InteractionState.UNHANDLED: (status.HTTP_400_BAD_REQUEST, "Unhandled interaction type"),
    InteractionState.UNROUTABLE: (status.HTTP_404_NOT_FOUND, "Unknown command"),
    InteractionState.FAILED: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Command failed"),
}


async def respond_to_request(
    dispatcher: InteractionDispatcher,
    request: Request,
    response_timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT,
) -> Response:
    """
    Handle one interaction request end to end.

    Returns:
        401 "Not verified" for bad signatures, the completed interaction
        response (200) otherwise, or an error status for requests that
        never produce one.
    """
    body = await request.body()
    outcome = await dispatcher.handle_request(
        body,
        request.headers.get(SIGNATURE_HEADER),
        request.headers.get(TIMESTAMP_HEADER),
    )
    return await outcome_to_response(outcome, response_timeout)


async def outcome_to_response(
    outcome: DispatchOutcome,
    response_timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT,
) -> Response:
    if outcome.state is InteractionState.REJECTED:
        return PlainTextResponse("Not verified", status_code=status.HTTP_401_UNAUTHORIZED)

    if outcome.state in _ERROR_RESPONSES:
        status_code, detail = _ERROR_RESPONSES[outcome.state]
        return JSONResponse(status_code=status_code, content={"detail": detail})

    interaction = outcome.interaction
    try:
        result = await asyncio.wait_for(interaction.completion.wait(), timeout=response_timeout)
    except asyncio.TimeoutError:
        logger.error(
            f"Interaction {interaction.id} was not completed within {response_timeout}s",
            extra={"command_path": interaction.path},
        )
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"detail": "Interaction response timed out"},
        )

    logger.info(
        "Responding to interaction",
        extra={"interaction_id": interaction.id, "response_type": _response_type(result)},
    )
    return JSONResponse(content=jsonable_encoder(result))


def _response_type(result) -> Optional[int]:
    if isinstance(result, dict):
        return result.get("type")
    return None


def create_interactions_router(
    dispatcher: InteractionDispatcher,
    path: str = "/interactions",
    response_timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT,
) -> APIRouter:
    """Router with a single POST endpoint bound to `dispatcher`."""
    router = APIRouter(tags=["interactions"])

    @router.post(path)
    async def interactions_webhook(request: Request) -> Response:
        """
        Receive a slash command interaction.

        Expected headers:
            X-Signature-Ed25519: hex signature of timestamp + body
            X-Signature-Timestamp: timestamp used in the signature

        Returns:
            {"type": 1} for pings, the command's response otherwise
        """
        return await respond_to_request(dispatcher, request, response_timeout)

    return router
