"""
Health check route.
"""
from fastapi import APIRouter, Depends, Response
from pastebin.models import HealthCheck
from pastebin.service import PasteService, get_paste_service

router = APIRouter()


@router.get("/api/healthz", response_model=HealthCheck)
def health_check(
    response: Response,
    service: PasteService = Depends(get_paste_service),
) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if the paste store answers, 500 with ok=false otherwise.
    """
    is_healthy = service.store.is_healthy()
    if not is_healthy:
        response.status_code = 500
    return HealthCheck(ok=is_healthy)
