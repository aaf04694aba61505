from .auth import User, SessionToken, ROLE_ADMIN, ROLE_USER
from .catalog import CylinderType, COMPANIES, CATEGORIES
from .inventory import Inventory, InventoryAdjustment
from .parties import Distributor, Staff, Customer
from .orders import Order, OrderItem, CylinderReturn
from .payments import Payment, PAYMENT_METHODS
from .sales import DailySales, SalesItem, EmptyReceivedOnSale
from .loans import CustomerCylinderLoan, LoanCylinderReturn

__all__ = [
    'User', 'SessionToken', 'ROLE_ADMIN', 'ROLE_USER',
    'CylinderType', 'COMPANIES', 'CATEGORIES',
    'Inventory', 'InventoryAdjustment',
    'Distributor', 'Staff', 'Customer',
    'Order', 'OrderItem', 'CylinderReturn',
    'Payment', 'PAYMENT_METHODS',
    'DailySales', 'SalesItem', 'EmptyReceivedOnSale',
    'CustomerCylinderLoan', 'LoanCylinderReturn',
]
