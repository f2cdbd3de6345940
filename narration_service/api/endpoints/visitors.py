import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from narration_service.api.deps import get_engine
from narration_service.domain.narration import NarrationEngine, NarrationError
from narration_service.models.schemas import (
    LanguageUpdateRequest,
    LocationPayload,
    NarrationRequest,
    NarrationResponse,
    VisitorCreateRequest,
    VisitorResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _http_error(exc: NarrationError) -> HTTPException:
    logger.info("%s: %s", type(exc).__name__, exc.message)
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("", response_model=VisitorResponse, status_code=status.HTTP_201_CREATED)
def register_visitor(
    request: VisitorCreateRequest,
    engine: NarrationEngine = Depends(get_engine),
) -> VisitorResponse:
    try:
        location = request.location.to_domain() if request.location else None
        visitor = engine.register_visitor(request.device_id, request.preferred_language, location)
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return VisitorResponse.from_domain(visitor)


@router.get("/{visitor_id}", response_model=VisitorResponse)
def get_visitor(visitor_id: UUID, engine: NarrationEngine = Depends(get_engine)) -> VisitorResponse:
    try:
        return VisitorResponse.from_domain(engine.get_visitor(visitor_id))
    except NarrationError as exc:
        raise _http_error(exc) from exc


@router.put("/{visitor_id}/location", status_code=status.HTTP_204_NO_CONTENT)
def update_location(
    visitor_id: UUID,
    payload: LocationPayload,
    engine: NarrationEngine = Depends(get_engine),
) -> Response:
    try:
        engine.update_visitor_location(visitor_id, payload.to_domain())
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{visitor_id}/language", status_code=status.HTTP_204_NO_CONTENT)
def update_language(
    visitor_id: UUID,
    payload: LanguageUpdateRequest,
    engine: NarrationEngine = Depends(get_engine),
) -> Response:
    try:
        engine.set_preferred_language(visitor_id, payload.language)
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{visitor_id}/narration", response_model=NarrationResponse)
def trigger_narration(
    visitor_id: UUID,
    payload: LocationPayload,
    engine: NarrationEngine = Depends(get_engine),
) -> NarrationResponse:
    try:
        result = engine.trigger_narration(visitor_id, payload.to_domain())
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return NarrationResponse.from_domain(result)


@router.post("/{visitor_id}/narration/request", response_model=NarrationResponse)
def request_narration(
    visitor_id: UUID,
    payload: NarrationRequest,
    engine: NarrationEngine = Depends(get_engine),
) -> NarrationResponse:
    try:
        result = engine.request_narration(
            visitor_id,
            payload.poi_code,
            reason=payload.reason,
            content_type=payload.content_type,
        )
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return NarrationResponse.from_domain(result)


@router.post("/{visitor_id}/narration/welcome", response_model=NarrationResponse)
def welcome_visitor(visitor_id: UUID, engine: NarrationEngine = Depends(get_engine)) -> NarrationResponse:
    try:
        result = engine.trigger_first_visit(visitor_id)
    except NarrationError as exc:
        raise _http_error(exc) from exc
    return NarrationResponse.from_domain(result)
