"""Build the in-memory stores on app startup, optionally with sample stock."""
import logging

from app.db.session import ClinicDatabase

logger = logging.getLogger(__name__)

SAMPLE_MEDICINES = [
    {"name": "Paracetamol 500mg", "price": "25.50", "stock_quantity": 100},
    {"name": "Amoxicillin 250mg", "price": "85.00", "stock_quantity": 50},
    {"name": "Ibuprofen 400mg", "price": "35.75", "stock_quantity": 75},
    {"name": "Cetirizine 10mg", "price": "15.00", "stock_quantity": 120},
    {"name": "Omeprazole 20mg", "price": "45.50", "stock_quantity": 60},
    {"name": "Metformin 500mg", "price": "12.00", "stock_quantity": 150},
    {"name": "Amlodipine 5mg", "price": "28.00", "stock_quantity": 80},
    {"name": "Azithromycin 500mg", "price": "120.00", "stock_quantity": 40},
    {"name": "Vitamin D3 60000 IU", "price": "55.00", "stock_quantity": 90},
    {"name": "Calcium Carbonate 500mg", "price": "18.50", "stock_quantity": 110},
    {"name": "Diclofenac Sodium 50mg", "price": "22.00", "stock_quantity": 70},
    {"name": "Ranitidine 150mg", "price": "32.00", "stock_quantity": 65},
    {"name": "Ciprofloxacin 500mg", "price": "95.00", "stock_quantity": 45},
    {"name": "Dolo 650mg", "price": "30.00", "stock_quantity": 100},
    {"name": "Montelukast 10mg", "price": "48.00", "stock_quantity": 55},
    {"name": "Pantoprazole 40mg", "price": "52.00", "stock_quantity": 60},
    {"name": "Losartan 50mg", "price": "38.00", "stock_quantity": 70},
    {"name": "Atorvastatin 10mg", "price": "42.00", "stock_quantity": 80},
    {"name": "Salbutamol Inhaler", "price": "125.00", "stock_quantity": 35},
    {"name": "Multivitamin Tablets", "price": "65.00", "stock_quantity": 95},
]


def init_db(seed: bool = True) -> ClinicDatabase:
    db = ClinicDatabase()
    if seed:
        for sample in SAMPLE_MEDICINES:
            db.medicines.create(**sample)
        logger.info(f"Seeded {len(SAMPLE_MEDICINES)} sample medicines")
    return db
