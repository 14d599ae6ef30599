"""GET /api/vibes -- the vibes a ride can be booked with."""

from fastapi import APIRouter

from vybgo.api.schemas import VibeResponse
from vybgo.domain.enums import VIBE_CATALOGUE

router = APIRouter(prefix="/vibes", tags=["vibes"])


@router.get("", response_model=list[VibeResponse], summary="List available vibes")
async def list_vibes():
    return VIBE_CATALOGUE
