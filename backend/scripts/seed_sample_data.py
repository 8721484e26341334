#!/usr/bin/env python3
"""
Script to create a sample WIP window, users and event for local development
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the backend directory to Python path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from wip_planner.models import AttendanceStatus
from wip_planner.services.database_manager import close_engine, create_all_tables
from wip_planner.services.database_manager.operations import (
    AttendanceOperations,
    BillOperations,
    EventOperations,
    UserOperations,
    WipWindowOperations,
)
from wip_planner.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_USERS = [
    {"user_id": "sample-alice", "email": "alice@example.com", "name": "Alice Example"},
    {"user_id": "sample-bob", "email": "bob@example.com", "name": "Bob Example"},
    {"user_id": "sample-chandra", "email": "chandra@example.com", "name": "Chandra Example"},
]

# 1x1 transparent PNG
SAMPLE_RECEIPT = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


async def seed_sample_data():
    """Create the sample records and return the event id"""
    await create_all_tables()

    users = []
    for user_data in SAMPLE_USERS:
        user = await UserOperations.ensure_user(**user_data)
        users.append(user)
        logger.info(f"User ready: {user.email} (ID: {user.id})")

    now = datetime.now(timezone.utc)
    window = await WipWindowOperations.create_window(
        name=f"Sample WIP {now:%B %Y}",
        start_date=now - timedelta(days=3),
        end_date=now + timedelta(days=4),
        is_active=True,
    )

    creator, *guests = users
    event = await EventOperations.create_event(
        creator,
        {
            "title": "Team dinner",
            "date": now + timedelta(days=1),
            "location": "Indiranagar",
            "notes": "Sample event",
            "wip_window_id": window.id,
        },
        [guest.email for guest in guests] + ["new.joiner@example.com"],
    )
    await AttendanceOperations.add_attendees(event.id, [creator.email], invited_by_id=creator.id)

    attendances = await AttendanceOperations.list_for_event(event.id)
    for attendance in attendances:
        if attendance.user_id:
            await AttendanceOperations.update_attendance(attendance.id, {"status": AttendanceStatus.CONFIRMED})

    await BillOperations.create_bill(
        event_id=event.id,
        payer_id=creator.id,
        amounts={"subtotal_cents": 450000, "tax_cents": 22500, "tip_cents": 30000, "total_cents": 502500},
        notes="Dinner for the team",
        currency="INR",
        items=[
            {"label": "Starters", "amount_cents": 150000, "quantity": 1},
            {"label": "Mains", "amount_cents": 300000, "quantity": 1},
        ],
        attachments=[{
            "file_name": "dinner.png",
            "url": SAMPLE_RECEIPT,
            "size_bytes": 68,
            "mime_type": "image/png",
        }],
    )

    logger.info(f"Seeded window {window.id} with event {event.id}")
    return event.id


async def main():
    """Main function"""
    try:
        event_id = await seed_sample_data()
        print(f"✅ Seeded sample data, event ID: {event_id}")
    except Exception as e:
        logger.error(f"Script failed: {e}")
        print(f"❌ Script failed: {e}")
        sys.exit(1)
    finally:
        await close_engine()


if __name__ == "__main__":
    asyncio.run(main())
