"""
Backup API Endpoints
Export / import of the full POS state as JSON

Author: TM3
Date: 2026-10-19
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from fastpos.api.deps import get_pos
from fastpos.core.exceptions import BackupValidationError
from fastpos.services.pos import PointOfSale

router = APIRouter()


@router.get("/export")
async def export_backup(pos: PointOfSale = Depends(get_pos)):
    document = pos.backup.export_backup()
    filename = f"fastpos-backup-{document['timestamp'][:10]}.json"
    return JSONResponse(content=document, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.post("/import")
async def import_backup(document: Any = Body(...), pos: PointOfSale = Depends(get_pos)):
    """
    Replace products, sales and expenses with the backup's contents

    A document without `products` and `sales` arrays is rejected and
    nothing changes.
    """
    try:
        summary = pos.backup.import_backup(document)
    except BackupValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "data": summary.model_dump()}
