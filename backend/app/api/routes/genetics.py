"""
Genetics API - Marker normalization, interpretation and querying.

Endpoints:
- POST /api/v1/genetics/normalize - Flatten genetic summaries into deduplicated markers
- GET  /api/v1/genetics/interpret - Interpret one gene/genotype pair
- POST /api/v1/genetics/partition - Bucket markers by curated impact
- POST /api/v1/genetics/completeness - Category coverage report
- POST /api/v1/genetics/traits - Trait panel scores
- POST /api/v1/genetics/query - Search / filter / sort markers
- GET  /api/v1/genetics/categories - Reference categories
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from app.services.insights.identity import deduplicate
from app.services.insights.interpreter import create_interpreter
from app.services.insights.models import (
    CategoryCompleteness,
    ImpactJudgment,
    ImpactPartition,
    MarkerRecord,
    QueryOptions,
    TraitScore,
)
from app.services.insights.query import available_categories, query
from app.services.insights.shape_normalizer import normalize_summaries

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class NormalizeRequest(BaseModel):
    """Genetic-summary rows as returned by the data service (``Category`` + ``Genes``)."""
    summaries: List[Dict[str, Any]] = Field(default_factory=list)


class MarkersRequest(BaseModel):
    """Marker rows in any key casing."""
    markers: List[Dict[str, Any]] = Field(default_factory=list)


class CompletenessRequest(MarkersRequest):
    category: Optional[str] = Field(None, description="One category; omit for every reference category")


class QueryRequest(MarkersRequest):
    options: QueryOptions = Field(default_factory=QueryOptions)


class MarkerListResponse(BaseModel):
    markers: List[MarkerRecord]
    total: int
    categories: List[str] = Field(default_factory=list)


class CategoryInfo(BaseModel):
    name: str
    description: str
    genes: List[str]


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/normalize", response_model=MarkerListResponse)
async def normalize_markers(request: NormalizeRequest):
    """
    Normalize every ``Genes`` encoding (object map, JSON string, object array,
    Key/Value array) into one deduplicated marker list.
    """
    markers = deduplicate(normalize_summaries(request.summaries))
    return MarkerListResponse(
        markers=markers,
        total=len(markers),
        categories=available_categories(markers),
    )


@router.get("/interpret", response_model=ImpactJudgment, response_model_by_alias=False)
async def interpret_marker(
    gene: str = Query(..., description="Gene symbol (e.g., ACTN3)"),
    genotype: str = Query("", description="Genotype (e.g., RR)"),
    category: Optional[str] = Query(None, description="Reference category; omit to search all categories"),
):
    interpreter = create_interpreter()
    if category:
        return interpreter.interpret(category, gene, genotype)
    return interpreter.interpret_any(gene, genotype)


@router.post("/partition", response_model=ImpactPartition)
async def partition_markers(request: MarkersRequest):
    """Bucket markers into beneficial / neutral / challenging / unknown."""
    return create_interpreter().partition(request.markers)


@router.post("/completeness", response_model=List[CategoryCompleteness])
async def category_completeness(request: CompletenessRequest):
    """
    Coverage of each category's defined genes. This is a test-coverage
    signal, not a performance score.
    """
    interpreter = create_interpreter()
    if request.category:
        if interpreter.table.get_category(request.category) is None:
            raise HTTPException(status_code=404, detail=f"Unknown category: {request.category}")
        return [interpreter.category_completeness(request.category, request.markers)]
    return interpreter.completeness_report(request.markers)


@router.post("/traits", response_model=List[TraitScore])
async def trait_scores(request: MarkersRequest):
    return create_interpreter().trait_scores(request.markers)


@router.post("/query", response_model=MarkerListResponse)
async def query_markers(request: QueryRequest):
    """Deduplicate, search, filter by category and impact band, then sort."""
    results = query(request.markers, request.options)
    return MarkerListResponse(
        markers=results,
        total=len(results),
        categories=available_categories(request.markers),
    )


@router.get("/categories", response_model=List[CategoryInfo])
async def list_categories():
    table = create_interpreter().table
    return [
        CategoryInfo(name=entry.name, description=entry.description, genes=list(entry.genes))
        for entry in table.categories.values()
    ]
