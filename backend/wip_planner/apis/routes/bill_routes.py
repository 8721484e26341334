"""
FastAPI routes for bills, receipt attachments and the bill download.
"""

from __future__ import annotations

from functools import lru_cache
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from wip_planner.schemas.api.auth import SessionUser
from wip_planner.schemas.api.bills import BillCreate, BillResponse
from wip_planner.schemas.api.common import ActionResponse
from wip_planner.services.auth import get_current_session
from wip_planner.services.auth.permissions import can_delete_bill, can_download_bills, can_upload_bill
from wip_planner.services.database_manager.operations import (
    BillOperations,
    EventOperations,
    UserOperations,
)
from wip_planner.services.receipts import ReceiptStorage, ReceiptValidationError, validate_receipt
from wip_planner.services.reports import build_bills_zip, zip_filename
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["bills"])

DEFAULT_BILL_NOTES = "Receipt uploaded"


@lru_cache(maxsize=1)
def get_receipt_storage() -> ReceiptStorage:
    """One storage (and Cloud Storage client) shared by every request"""
    return ReceiptStorage.from_settings()


@router.post("/{event_id}/bills", response_model=BillResponse, status_code=201)
async def create_bill(
    event_id: UUID,
    payload: BillCreate,
    session_user: SessionUser = Depends(get_current_session),
    storage: ReceiptStorage = Depends(get_receipt_storage),
):
    """
    Upload a bill with at least one receipt.

    - **subtotal_cents**: when omitted the subtotal is the sum of the item lines
    - **files**: JPG, PNG or PDF, each within the configured size limit
    """
    try:
        event = await EventOperations.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        if not can_upload_bill(event, session_user.id):
            raise HTTPException(status_code=403, detail="Access denied")

        settings = get_settings()
        try:
            checked = [
                validate_receipt(f.name, f.url, f.size, settings.RECEIPT_MAX_BYTES) for f in payload.files
            ]
        except ReceiptValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if session_user.email:
            payer = await UserOperations.ensure_user(
                session_user.id, session_user.email, session_user.name, session_user.image
            )
        else:
            payer = await UserOperations.get_user_by_id(session_user.id)
        if payer is None:
            raise HTTPException(status_code=404, detail="User not found")

        if payload.subtotal_cents is not None:
            subtotal = payload.subtotal_cents
        else:
            subtotal = sum(item.amount_cents * item.quantity for item in payload.items)
        amounts = {
            "subtotal_cents": subtotal,
            "tax_cents": payload.tax_cents,
            "tip_cents": payload.tip_cents,
            "total_cents": subtotal + payload.tax_cents + payload.tip_cents,
        }

        attachments = []
        for receipt, check in zip(payload.files, checked):
            url = await run_in_threadpool(storage.store, str(event_id), receipt.name, receipt.url, check.mime_type)
            attachments.append({
                "file_name": receipt.name,
                "url": url,
                "size_bytes": check.size,
                "mime_type": check.mime_type,
            })

        bill = await BillOperations.create_bill(
            event_id=event_id,
            payer_id=payer.id,
            amounts=amounts,
            notes=payload.notes or DEFAULT_BILL_NOTES,
            currency=settings.DEFAULT_CURRENCY,
            items=[item.model_dump() for item in payload.items],
            attachments=attachments,
        )
        return BillResponse.model_validate(bill)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating bill for event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{event_id}/bills/{bill_id}", response_model=ActionResponse)
async def delete_bill(
    event_id: UUID,
    bill_id: UUID,
    session_user: SessionUser = Depends(get_current_session),
    storage: ReceiptStorage = Depends(get_receipt_storage),
):
    """Delete a bill and its attachments. Payer or event creator only."""
    try:
        bill = await BillOperations.get_bill(bill_id)
        if bill is None:
            raise HTTPException(status_code=404, detail="Receipt not found")
        if bill.event_id != event_id:
            raise HTTPException(status_code=404, detail="Receipt not found in this event")

        event = await EventOperations.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        if not can_delete_bill(bill, event, session_user.id):
            raise HTTPException(status_code=403, detail="Access denied")

        await BillOperations.delete_bill(bill_id)
        for attachment in bill.attachments:
            await run_in_threadpool(storage.discard, attachment.url)

        return ActionResponse(success=True, message="Receipt deleted")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting bill {bill_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{event_id}/download-bills")
async def download_bills(
    event_id: UUID,
    session_user: SessionUser = Depends(get_current_session),
    storage: ReceiptStorage = Depends(get_receipt_storage),
):
    """ZIP with a bill summary and every receipt. Creator or confirmed attendees only."""
    try:
        event = await EventOperations.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")

        if not can_download_bills(event, session_user.id):
            raise HTTPException(status_code=403, detail="Access denied")

        content = await run_in_threadpool(build_bills_zip, event, storage)
        filename = zip_filename(event.title)
        logger.info(f"Built bill archive for event {event_id} ({len(content)} bytes)")
        return Response(
            content=content,
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building bill archive for event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
