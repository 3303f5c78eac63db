from app.models.medicine import Medicine
from app.models.invoice import CartItem, Invoice

__all__ = ["Medicine", "CartItem", "Invoice"]
