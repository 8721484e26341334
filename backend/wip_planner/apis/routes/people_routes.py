"""
FastAPI routes for the people directory.
"""

from fastapi import APIRouter, Depends, HTTPException

from wip_planner.schemas.api.auth import SessionUser
from wip_planner.schemas.api.cost_sharing import PeopleListResponse
from wip_planner.services.auth import get_current_session
from wip_planner.services.cost_sharing import calculate_person_stats
from wip_planner.services.database_manager.operations import UserOperations
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/people", tags=["people"])


@router.get("/", response_model=PeopleListResponse)
async def list_people(session_user: SessionUser = Depends(get_current_session)):
    """People with a proposed or confirmed attendance, with what they spent and owe."""
    try:
        users = await UserOperations.list_people()
        return PeopleListResponse(people=[calculate_person_stats(user) for user in users])

    except Exception as e:
        logger.error(f"Error fetching people: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
