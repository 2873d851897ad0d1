from .client import KappitalClient
from .config_types import ManagerConfig, RequestInfo
from .errors import BodyTypeError, KappitalClientError, NetworkError, RequestBuildError, TLSMaterialError
from .transport import execute

__all__ = [
    "KappitalClient",
    "ManagerConfig",
    "RequestInfo",
    "execute",
    "KappitalClientError",
    "BodyTypeError",
    "NetworkError",
    "RequestBuildError",
    "TLSMaterialError",
]
