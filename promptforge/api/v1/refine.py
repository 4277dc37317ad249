"""Stand-alone refinement endpoint used by the editor."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from promptforge.core.config import settings
from promptforge.services.ai_service import RefinementProvider, RefineRequest

logger = logging.getLogger("promptforge.api.refine")

router = APIRouter(tags=["refine"])


class RefineBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt_text: Optional[str] = Field(None, alias="promptText")
    command: str = "enhance"
    shorten_length: Optional[int] = Field(None, alias="shortenLength")
    provider: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")


class RefineResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refined_text: str = Field(..., alias="refinedText")
    tokens_used: int = Field(..., alias="tokensUsed")
    provider: str
    request_id: str = Field(..., alias="requestId")


def get_refiner(request: Request) -> RefinementProvider:
    return request.app.state.refiner


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/refine", response_model=RefineResponse)
async def refine(request: Request, refiner: RefinementProvider = Depends(get_refiner)):
    """Return a refined version of ``promptText``."""
    try:
        payload = await request.json()
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, "Request body must be JSON")

    try:
        body = RefineBody.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, exc.errors()[0]["msg"])

    if not body.prompt_text:
        return _error(status.HTTP_400_BAD_REQUEST, "promptText is required")

    try:
        result = await refiner.refine(
            RefineRequest(
                prompt_text=body.prompt_text,
                command=body.command,
                shorten_length=body.shorten_length,
                provider=body.provider or settings.DEFAULT_LLM_PROVIDER,
                api_key=body.api_key,
            )
        )
    except Exception:
        logger.exception("Refine API error")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return JSONResponse(
        content=RefineResponse(
            refined_text=result.refined_text,
            tokens_used=result.tokens_used,
            provider=result.provider,
            request_id=result.request_id,
        ).model_dump(by_alias=True)
    )


@router.api_route("/refine", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def refine_method_not_allowed():
    response = _error(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")
    response.headers["Allow"] = "POST"
    return response
