"""
Calculator API.

GET  /api/calculators         : catalog entries, optionally filtered by ?q= or ?category=
GET  /api/calculators/{slug}  : one catalog entry
POST /api/calculators/{slug}  : run a calculator on submitted form fields
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from .. import catalog
from ..calculators.base import CalculatorInputError
from ..calculators.registry import get_calculator, has_calculator
from ..schemas import CalculateRequest, CalculateResponse, CalculatorInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculators", tags=["calculators"])


@router.get("", response_model=List[CalculatorInfo])
def list_calculators(q: Optional[str] = None, category: Optional[str] = None):
    entries = catalog.search(q) if q else catalog.list_entries()
    if category:
        entries = [e for e in entries if e.category.lower() == category.lower()]
    return [e.to_dict() for e in entries]


@router.get("/{slug}", response_model=CalculatorInfo)
def get_calculator_info(slug: str):
    try:
        return catalog.get_entry(slug).to_dict()
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Calculator not found: {slug}")


@router.post("/{slug}", response_model=CalculateResponse)
def run_calculator(slug: str, request: CalculateRequest):
    """
    Run one calculator.

    Invalid input comes back as 400 with the message the page shows the user.
    """
    if not has_calculator(slug):
        raise HTTPException(status_code=404, detail=f"No calculator registered for slug: {slug}")

    calculator = get_calculator(slug)
    logger.debug("Running %s with fields %s", type(calculator).__name__, sorted(request.fields))
    try:
        result = calculator.calculate(request.fields)
    except CalculatorInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "slug": slug,
        "calculator_used": type(calculator).__name__,
        "result": result,
    }
