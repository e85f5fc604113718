from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class SortClause(BaseModel):
    item: str = Field(description="Field to sort on")
    order: Literal["asc", "desc"] = "asc"


class SearchRequest(BaseModel):
    query: Optional[str] = Field(default=None, description="Lucene query string; defaults to *:*")
    filter_queries: List[str] = Field(default_factory=list, description="Filter query strings (no scoring)")
    facet_fields: List[str] = Field(default_factory=list, description="Fields to count values of")
    sort: List[SortClause] = Field(default_factory=list)
    start: int = Field(default=0, ge=0)
    rows: int = Field(default=10, ge=0, le=1000)


class SearchResponse(BaseModel):
    num_found: int
    start: int
    max_score: Optional[float] = None
    documents: List[Dict[str, Any]]
    facets: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class IndexResponse(BaseModel):
    collection: str
    format: str
    indexed: int
