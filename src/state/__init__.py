from .role import Role
from .runtime import RuntimeDeps
from .settings import AppSettings
from .request_status import RequestStatus
from .supervisor_state import SupervisorState
from .supervisor_event import SupervisorEvent
from .relay import AdminBinding, ClientSession, CaptureRequest, Connection

__all__ = [
    "AdminBinding",
    "AppSettings",
    "CaptureRequest",
    "ClientSession",
    "Connection",
    "RequestStatus",
    "Role",
    "RuntimeDeps",
    "SupervisorEvent",
    "SupervisorState",
]
