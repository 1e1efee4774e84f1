from .access_control import AccessControlClient
from .auth import AuthClient
from .monthly_pass import MonthlyPassClient
from .pricing import PricingClient
from .reports import ReportsClient
from .staff import StaffClient
from .vehicles import VehiclesClient

__all__ = [
    "AccessControlClient",
    "AuthClient",
    "MonthlyPassClient",
    "PricingClient",
    "ReportsClient",
    "StaffClient",
    "VehiclesClient",
]
