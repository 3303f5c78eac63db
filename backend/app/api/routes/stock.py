"""Cart pre-check: can the shelf cover these quantities right now?"""
from fastapi import APIRouter, Depends

from app.api.deps import get_db
from app.core.exceptions import BusinessError
from app.db.session import ClinicDatabase
from app.schemas.stock import StockCheckRequest, StockCheckResponse
from app.services.stock_service import validate_stock

router = APIRouter()


@router.post("/validate-stock", response_model=StockCheckResponse)
def validate_cart_stock(data: StockCheckRequest, db: ClinicDatabase = Depends(get_db)):
    """Per-line availability for the cart. Reserves nothing."""
    try:
        return validate_stock(db.medicines, [(item.medicine_id, item.quantity) for item in data.items])
    except Exception as e:
        raise BusinessError.server_error(e)
