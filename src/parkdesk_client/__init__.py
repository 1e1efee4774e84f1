from .access_gate import (
    PERMISSION_VOCABULARY,
    AccessGate,
    GateDecision,
    GateOutcome,
    GateResult,
    check_access,
    validate_permissions,
)
from .app import create_store
from .auth_controller import AuthController
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    StorageError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import ApiResult, HttpClient
from .models import (
    VEHICLE_TYPES,
    Building,
    DashboardData,
    MonthlyPass,
    MonthlyPassRequest,
    PassStatus,
    PriceTable,
    Role,
    StaffRecord,
    UserRecord,
    VehicleRecord,
    VehicleType,
)
from .printing import PrinterTransport, ReceiptPrinter
from .session_storage import FileSessionStorage, MemorySessionStorage, SessionStorage, SessionStore
from .state import AppState, AuthStatus, SlotSequencer
from .store import ParkingStore, filter_vehicles
from .token_guard import TokenValidation, validate_token

__all__ = [
    "PERMISSION_VOCABULARY",
    "VEHICLE_TYPES",
    "AccessGate",
    "ApiError",
    "ApiResult",
    "AppState",
    "AuthController",
    "AuthStatus",
    "Building",
    "ClientConfig",
    "ConfigError",
    "ConflictError",
    "DashboardData",
    "FileSessionStorage",
    "ForbiddenError",
    "GateDecision",
    "GateOutcome",
    "GateResult",
    "HttpClient",
    "MemorySessionStorage",
    "MonthlyPass",
    "MonthlyPassRequest",
    "NotFoundError",
    "ParkingStore",
    "PassStatus",
    "PriceTable",
    "PrinterTransport",
    "RateLimitError",
    "ReceiptPrinter",
    "Role",
    "ServerError",
    "SessionStorage",
    "SessionStore",
    "SlotSequencer",
    "StaffRecord",
    "StorageError",
    "TokenValidation",
    "TransportError",
    "UnauthorizedError",
    "UserRecord",
    "ValidationError",
    "VehicleRecord",
    "VehicleType",
    "check_access",
    "create_store",
    "filter_vehicles",
    "load_config",
    "validate_permissions",
    "validate_token",
]
