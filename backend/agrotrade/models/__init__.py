from .auth import User
from .inventory import Produce
from .sales import Sale, CreditSale

__all__ = [
    'User',
    'Produce',
    'Sale', 'CreditSale',
]
