"""Invoices: checkout workflow, bills ledger, PDF and CSV export. No update or delete."""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from app.api.deps import get_db, get_settings
from app.core.config import Settings
from app.core.exceptions import BusinessError
from app.db.session import ClinicDatabase
from app.models.invoice import CartItem, Invoice
from app.schemas.invoice import InvoiceCreate, InvoiceResponse
from app.services import csv_service
from app.services.invoice_service import InvoiceDraft, create_invoice
from app.services.pdf_service import generate_invoice_pdf

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_invoice(db: ClinicDatabase, invoice_id: str) -> Invoice:
    invoice = db.invoices.get_by_id(invoice_id)
    if not invoice:
        raise BusinessError.not_found("Invoice", invoice_id)
    return invoice


def _to_draft(data: InvoiceCreate) -> InvoiceDraft:
    return InvoiceDraft(
        client_name=data.client_name,
        client_address=data.client_address,
        client_phone=data.client_phone,
        items=tuple(
            CartItem(
                medicine_id=item.medicine_id,
                medicine_name=item.medicine_name,
                quantity=item.quantity,
                rate=item.rate,
                amount=item.amount,
            )
            for item in data.items
        ),
        subtotal=data.subtotal,
        tax_percentage=data.tax_percentage,
        tax_amount=data.tax_amount,
        total_due=data.total_due,
        bill_number=data.bill_number,
        issue_date=data.issue_date,
    )


@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice_from_cart(
    data: InvoiceCreate,
    db: ClinicDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Check out a cart: re-validate stock, deduct it and store the invoice.

    A 400 InsufficientStock response lists every short line with the
    quantity asked for and what is on the shelf; no stock is touched then.
    """
    try:
        result = create_invoice(db, _to_draft(data), check_totals=settings.VERIFY_INVOICE_TOTALS)
    except Exception as e:
        raise BusinessError.server_error(e)
    if not result.ok:
        raise BusinessError.from_domain(result.error)
    return result.value


@router.get("/invoices", response_model=List[InvoiceResponse])
def list_invoices(
    search: Optional[str] = Query(None),
    db: ClinicDatabase = Depends(get_db),
):
    """Bills ledger, newest first. Search matches client name or bill number."""
    try:
        invoices = db.invoices.get_all()
    except Exception as e:
        raise BusinessError.server_error(e)
    if search and search.strip():
        needle = search.strip().lower()
        invoices = [
            inv for inv in invoices
            if needle in inv.client_name.lower() or needle in inv.bill_number.lower()
        ]
    return invoices


@router.get("/invoices/export")
def export_invoices_csv(db: ClinicDatabase = Depends(get_db)):
    """Export all invoices as CSV file."""
    content = csv_service.export_invoices_csv(db.invoices.get_all())
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=bills-export-{date.today()}.csv"},
    )


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str, db: ClinicDatabase = Depends(get_db)):
    return _get_invoice(db, invoice_id)


@router.get("/invoices/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: str,
    db: ClinicDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Printable invoice, rendered from the stored record."""
    invoice = _get_invoice(db, invoice_id)
    try:
        buffer = generate_invoice_pdf(invoice, settings)
    except Exception as e:
        raise BusinessError.server_error(e)
    logger.info(f"PDF generated for invoice {invoice.bill_number}")
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=invoice_{invoice.bill_number}.pdf"},
    )
