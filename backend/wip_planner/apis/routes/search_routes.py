"""
FastAPI route for global search across events and people.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from wip_planner.schemas.api.auth import SessionUser
from wip_planner.schemas.api.search import SearchResponse, SearchResult
from wip_planner.services.auth import get_current_session
from wip_planner.services.database_manager.operations import EventOperations, UserOperations
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

MIN_QUERY_LENGTH = 2
RESULT_LIMIT = 10


@router.get("/", response_model=SearchResponse)
async def search(
    q: Optional[str] = Query(None, description="Search text, at least two characters"),
    session_user: SessionUser = Depends(get_current_session),
):
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return SearchResponse(results=[])

    try:
        events = await EventOperations.search_events(query, limit=RESULT_LIMIT)
        users = await UserOperations.search_users(query, limit=RESULT_LIMIT)

        results = [
            SearchResult(
                id=str(event.id),
                type="event",
                title=event.title,
                subtitle=event.creator.name if event.creator else None,
                date=event.date.date().isoformat(),
                location=event.location,
                href=f"/events/{event.id}",
            )
            for event in events
        ]
        results.extend(
            SearchResult(
                id=user.id,
                type="person",
                title=user.name or user.email,
                subtitle=user.email,
                href=f"/people/{user.id}",
            )
            for user in users
        )
        return SearchResponse(results=results)

    except Exception as e:
        logger.error(f"Error searching for '{query}': {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
