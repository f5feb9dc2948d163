from .users import User, UserRole
from .laundries import Laundry, LaundryStatus, LaundrySuspension
from .orders import Order, OrderStatus
from .activities import Activity, ActivityType

__all__ = [
    'User', 'UserRole',
    'Laundry', 'LaundryStatus', 'LaundrySuspension',
    'Order', 'OrderStatus',
    'Activity', 'ActivityType',
]
