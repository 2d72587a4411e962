"""Routes for quote request submission."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from quote_service.dependencies import get_quote_handler
from quote_service.schemas import HealthResponse, QuoteResponse
from quote_service.services import QuoteSubmissionHandler

router = APIRouter(prefix="/quote", tags=["quote"])


@router.post(
    "",
    response_model=QuoteResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": QuoteResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": QuoteResponse},
    },
)
async def submit_quote(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    handler: QuoteSubmissionHandler = Depends(get_quote_handler),
) -> JSONResponse:
    """Validate the quote request and email it to the team."""

    client_ip = request.client.host if request.client else None
    result = await handler.submit(payload, client_ip=client_ip)
    return JSONResponse(status_code=result.status_code, content=result.response.to_payload())


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    return QuoteSubmissionHandler.health()


__all__ = ["router"]
