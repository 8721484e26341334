from typing import List, Literal, Optional

from pydantic import BaseModel


class SearchResult(BaseModel):
    id: str
    type: Literal["event", "person"]
    title: str
    subtitle: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    href: str


class SearchResponse(BaseModel):
    results: List[SearchResult]
