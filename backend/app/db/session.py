"""Store container. One ClinicDatabase is built per application instance."""
from dataclasses import dataclass, field

from app.db.invoice_store import InvoiceStore
from app.db.medicine_store import MedicineStore


@dataclass
class ClinicDatabase:
    """Everything the app keeps in memory. Restarting the process clears it."""

    medicines: MedicineStore = field(default_factory=MedicineStore)
    invoices: InvoiceStore = field(default_factory=InvoiceStore)
