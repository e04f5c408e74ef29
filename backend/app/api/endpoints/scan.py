"""Strategy scan API endpoint."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.api.schemas import ScanRequest, ScanResponse
from app.services.scan_service import scan_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scan"])


def _failure(status_code: int, error: str) -> JSONResponse:
    """Error response carrying the same envelope as a successful scan."""
    body = ScanResponse(success=False, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, mode="json"))


@router.post(
    "/scan",
    response_model=ScanResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ScanResponse, "description": "Ticker missing"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ScanResponse, "description": "Internal error"},
    },
)
async def scan_strategies(request: ScanRequest) -> ScanResponse | JSONResponse:
    """
    Synthesize option strategies for a ticker.

    Fetches the spot price, prices the strategy catalog on a theoretical
    option chain, then filters and ranks it for the requested risk profile.

    Args:
        request: Ticker, risk profile, DTE window and result count

    Returns:
        ScanResponse with up to ``maxStrategies`` strategies, or an error
        envelope (400 for a missing ticker, 500 for internal failures)
    """
    if not request.ticker or not request.ticker.strip():
        return _failure(status.HTTP_400_BAD_REQUEST, "Ticker is required")

    try:
        return await scan_service.scan(request)
    except Exception as e:
        logger.error(f"Error scanning {request.ticker}: {e}", exc_info=True)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
