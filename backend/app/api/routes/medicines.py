"""Medicines: inventory CRUD, stock moves, bulk/CSV import and CSV export."""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from app.api.deps import get_db, get_settings
from app.core.audit import AuditLog
from app.core.config import Settings
from app.core.exceptions import BusinessError, ClinicError
from app.db.session import ClinicDatabase
from app.models.medicine import Medicine
from app.schemas.medicine import (
    DeleteResponse,
    MedicineCreate,
    MedicineResponse,
    MedicineUpdate,
    StockAdjustment,
)
from app.services import csv_service, inventory_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_medicine(db: ClinicDatabase, medicine_id: str) -> Medicine:
    medicine = db.medicines.get_by_id(medicine_id)
    if not medicine:
        raise BusinessError.not_found("Medicine", medicine_id)
    return medicine


@router.get("/medicines", response_model=List[MedicineResponse])
def list_medicines(
    search: Optional[str] = Query(None),
    db: ClinicDatabase = Depends(get_db),
):
    """All medicines ordered by name. Optional case-insensitive name search."""
    try:
        return inventory_service.search_medicines(db.medicines, search)
    except Exception as e:
        raise BusinessError.server_error(e)


@router.get("/medicines/low-stock", response_model=List[MedicineResponse])
def list_low_stock(
    threshold: Optional[int] = Query(None, ge=0, description="Stock threshold for low stock alert"),
    db: ClinicDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Medicines below the threshold, emptiest first."""
    limit = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return inventory_service.low_stock(db.medicines, limit)


@router.get("/medicines/export")
def export_medicines_csv(db: ClinicDatabase = Depends(get_db)):
    """Export inventory as CSV file."""
    content = csv_service.export_medicines_csv(db.medicines.get_all())
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=medicines_{date.today()}.csv"},
    )


@router.get("/medicines/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: str, db: ClinicDatabase = Depends(get_db)):
    return _get_medicine(db, medicine_id)


@router.post("/medicines", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
def create_medicine(data: MedicineCreate, db: ClinicDatabase = Depends(get_db)):
    """Add a new medicine. Stock defaults to 0 and description to empty."""
    try:
        medicine = db.medicines.create(
            name=data.name,
            price=data.price,
            stock_quantity=data.stock_quantity,
            description=data.description,
        )
    except ClinicError as e:
        raise BusinessError.from_domain(e)
    except Exception as e:
        raise BusinessError.server_error(e)
    AuditLog.log_medicine_change("create", medicine.id, {"name": medicine.name})
    return medicine


@router.post("/medicines/bulk", response_model=List[MedicineResponse], status_code=status.HTTP_201_CREATED)
def create_medicines_bulk(rows: List[MedicineCreate], db: ClinicDatabase = Depends(get_db)):
    """Add several medicines at once; nothing is added if any row is invalid."""
    if not rows:
        raise BusinessError.bad_request("At least one medicine is required")
    try:
        return inventory_service.add_medicines(db.medicines, [row.model_dump() for row in rows])
    except ClinicError as e:
        raise BusinessError.from_domain(e)
    except Exception as e:
        raise BusinessError.server_error(e)


@router.post("/medicines/import", response_model=List[MedicineResponse], status_code=status.HTTP_201_CREATED)
async def import_medicines_csv(file: UploadFile = File(...), db: ClinicDatabase = Depends(get_db)):
    """Import medicines from a CSV upload (name, price, stockQuantity, description)."""
    content = await file.read()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise BusinessError.bad_request("Invalid file encoding, expected UTF-8")
    try:
        rows = csv_service.parse_medicines_csv(text)
        created = inventory_service.add_medicines(db.medicines, rows)
    except ClinicError as e:
        raise BusinessError.from_domain(e)
    except Exception as e:
        raise BusinessError.server_error(e)
    logger.info(f"Imported {len(created)} medicines from {file.filename}")
    return created


@router.put("/medicines/{medicine_id}", response_model=MedicineResponse)
def update_medicine(medicine_id: str, updates: MedicineUpdate, db: ClinicDatabase = Depends(get_db)):
    """Partial update: only the fields sent are changed."""
    changes = updates.model_dump(exclude_unset=True)
    try:
        medicine = db.medicines.update(medicine_id, **changes)
    except ClinicError as e:
        raise BusinessError.from_domain(e)
    except Exception as e:
        raise BusinessError.server_error(e)
    if medicine is None:
        raise BusinessError.not_found("Medicine", medicine_id)
    AuditLog.log_medicine_change("update", medicine_id, changes)
    return medicine


@router.delete("/medicines/{medicine_id}", response_model=DeleteResponse)
def delete_medicine(medicine_id: str, db: ClinicDatabase = Depends(get_db)):
    """Hard delete. Existing invoices keep their own copy of the line."""
    medicine = _get_medicine(db, medicine_id)
    if not db.medicines.delete(medicine_id):
        raise BusinessError.not_found("Medicine", medicine_id)
    AuditLog.log_medicine_change("delete", medicine_id, {"name": medicine.name})
    return {"message": "Medicine deleted successfully", "id": medicine_id}


@router.patch("/medicines/{medicine_id}/stock", response_model=MedicineResponse)
def adjust_medicine_stock(
    medicine_id: str,
    adjustment: StockAdjustment,
    db: ClinicDatabase = Depends(get_db),
):
    """Add a signed delta to stock. Refused (400) if stock would go below zero."""
    try:
        result = inventory_service.adjust_stock(db.medicines, medicine_id, adjustment.delta)
    except Exception as e:
        raise BusinessError.server_error(e)
    if not result.ok:
        raise BusinessError.from_domain(result.error)
    return result.value
