import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from db.database import get_store
from db.store import Store

router = APIRouter()

def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")

@router.get("/export.json")
async def export_json(store: Store = Depends(get_store)):
    filename = f"cardbox-export-{_timestamp()}.json"
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return JSONResponse(store.export_json(), headers=headers)

@router.get("/export.csv")
async def export_csv(store: Store = Depends(get_store)):
    filename = f"cardbox-export-{_timestamp()}.csv"
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return Response(store.export_csv(), media_type="text/csv", headers=headers)

@router.post("/import")
async def import_file(file: UploadFile = File(...), store: Store = Depends(get_store)):
    """Import a .json snapshot (all or nothing) or a .csv note list (row by row)."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="Import file is required")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Import file is empty")
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="Import file must be UTF-8") from exc
    name = file.filename.lower()
    if name.endswith(".json"):
        try:
            snapshot = json.loads(text)
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc
        return store.import_json(snapshot)
    if name.endswith(".csv"):
        return store.import_csv(text)
    raise HTTPException(status_code=400, detail="Unsupported file type")
