from .auth import User
from .catalog import Product
from .customers import Customer, CustomerPayment
from .sales import Sale, SaleItem
from .audit import AuditLogEntry

__all__ = [
    'User',
    'Product',
    'Customer', 'CustomerPayment',
    'Sale', 'SaleItem',
    'AuditLogEntry',
]
