from fastapi import APIRouter, Depends, UploadFile, File
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..database import get_feed, get_store
from ..schemas import ImportSummary
from ..services.backup_service import BackupService, backup_filename
from ..services.ledger_feed import LedgerFeed
from ..store import RecordStore

router = APIRouter()


@router.get("/export")
def export_data(store: RecordStore = Depends(get_store)):
    """Download every table as a JSON document."""
    document = BackupService(store).export_data()
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/import", response_model=ImportSummary)
async def import_data(
    file: UploadFile = File(...),
    store: RecordStore = Depends(get_store),
):
    """Replace the tables present in an uploaded export document."""
    contents = await file.read()
    return await run_in_threadpool(BackupService(store).import_data, contents)


@router.delete("/", status_code=204)
async def clear_all_data(feed: LedgerFeed = Depends(get_feed)):
    """Delete all transactions and budgets. Categories are kept."""
    await feed.clear_all_data()
