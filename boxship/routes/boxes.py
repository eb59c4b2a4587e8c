# ==== BOX ROUTES ==== #

"""
Box routes for recording shipping boxes and listing them.

These endpoints play the part of the box form and the box list: they
validate submissions, ask the shipping engine for costs and go through
the box store for persistence.
"""

import math
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from boxship.business.countries import DestinationCountry, list_countries
from boxship.observability.logging import ContextualLogger
from boxship.observability.tracing import get_tracer
from boxship.schemas.box import (
    BoxCreateRequest,
    BoxListResponse,
    BoxResponse,
    CountryResponse,
    QuoteResponse,
    ValidationErrorResponse,
)
from boxship.services.box_store import BoxStore, fetch_boxes, save_box
from boxship.services.shipping import (
    WEIGHT_TOO_LARGE,
    BoxSubmission,
    describe_record,
    quote,
    summarize,
    validate,
)
from boxship.storage.db import get_db_session


# ==== ROUTER INITIALIZATION ==== #


router = APIRouter()
tracer = get_tracer(__name__)
logger = ContextualLogger(__name__)


def get_box_store(db: AsyncSession = Depends(get_db_session)) -> BoxStore:
    """FastAPI dependency providing a store bound to the request session."""
    return BoxStore(db)


# ==== PRICING ENDPOINTS ==== #


@router.get("/countries", response_model=List[CountryResponse])
async def get_countries() -> List[CountryResponse]:
    """List destination options in pricing table order."""
    return [
        CountryResponse(code=option.code.value, name=option.name, multiplier=option.multiplier)
        for option in list_countries()
    ]


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    weight: float = Query(..., ge=0, description="Weight in kilograms"),
    destination_country: DestinationCountry = Query(..., description="Destination code")
) -> QuoteResponse:
    """Estimate the shipping cost before a box is saved."""
    estimate = quote(weight, destination_country)
    if not math.isfinite(estimate.shipping_cost):
        raise HTTPException(status_code=422, detail=WEIGHT_TOO_LARGE)
    return QuoteResponse(**asdict(estimate))


# ==== BOX ENDPOINTS ==== #


@router.post(
    "/boxes",
    response_model=BoxResponse,
    status_code=201,
    responses={422: {"model": ValidationErrorResponse}}
)
async def create_box(
    box_data: BoxCreateRequest,
    store: BoxStore = Depends(get_box_store)
):
    """
    Validate a box submission and save it.

    Args:
        box_data (BoxCreateRequest): Form fields
        store (BoxStore): Box store dependency

    Returns:
        BoxResponse: Saved box, or a 422 body listing every field error
    """
    with tracer.start_as_current_span("create_box") as span:
        submission = BoxSubmission.from_form(box_data.model_dump())
        result = validate(submission)

        if not result.is_valid:
            span.set_attribute("validation_failed", True)
            logger.info("Box submission rejected", fields=sorted(result.errors))
            return JSONResponse(
                status_code=422,
                content=ValidationErrorResponse(
                    errors=result.errors,
                    weight=result.weight if math.isfinite(result.weight) else None
                ).model_dump()
            )

        box = await save_box(store, submission)
        span.set_attribute("box_id", box.id)
        return BoxResponse(**describe_record(box))


@router.get("/boxes", response_model=BoxListResponse)
async def list_boxes(store: BoxStore = Depends(get_box_store)) -> BoxListResponse:
    """List saved boxes newest first with the total cost."""
    with tracer.start_as_current_span("list_boxes") as span:
        boxes = await fetch_boxes(store)
        summary = summarize(boxes)
        span.set_attribute("box_count", summary.count)

        return BoxListResponse(
            items=[BoxResponse(**describe_record(box)) for box in boxes],
            count=summary.count,
            total_cost=summary.total_cost,
            total_cost_display=summary.total_cost_display
        )
