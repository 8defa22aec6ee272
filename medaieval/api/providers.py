from __future__ import annotations

from fastapi import APIRouter, Depends

from medaieval.gateway import AIGateway
from medaieval.models import ProviderStatus
from medaieval.wiring import get_gateway

router = APIRouter(prefix="/providers", tags=["providers"])


def _status(gateway: AIGateway) -> ProviderStatus:
    return ProviderStatus(
        order=gateway.provider_order(),
        failed=gateway.failed_providers(),
        current=gateway.get_current_provider(),
    )


@router.get("", response_model=ProviderStatus)
async def provider_status(gateway: AIGateway = Depends(get_gateway)) -> ProviderStatus:
    return _status(gateway)


@router.post("/reset", response_model=ProviderStatus)
async def reset_providers(gateway: AIGateway = Depends(get_gateway)) -> ProviderStatus:
    gateway.reset_providers()
    return _status(gateway)
