import logging
from typing import List

from fastapi import APIRouter, Depends

from narration_service.api.deps import get_catalog
from narration_service.models.schemas import POISummary
from narration_service.services import POICatalog

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[POISummary])
def list_pois(include_inactive: bool = False, catalog: POICatalog = Depends(get_catalog)) -> List[POISummary]:
    """List catalog POIs with the audio languages each one offers."""
    pois = [
        POISummary.from_domain(poi)
        for poi in catalog.snapshot()
        if include_inactive or poi.is_active
    ]
    logger.info("Listed %s POIs", len(pois))
    return pois
