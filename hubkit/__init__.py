"""hub-kit: typed HTTP endpoints from one schema description.

Schema descriptors (``hubkit.schema``) are written once and used twice: the
request pipeline (``hubkit.pipeline``) validates requests against them, and
the contract compiler (``hubkit.contract``) renders them into an OpenAPI
document.
"""

from hubkit.contract import (
    ContractCompiler,
    OpenApiConfig,
    Route,
    RouteBuilder,
    RouteDefinition,
    create_route_handler,
)
from hubkit.core.exceptions import (
    BadRequestError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    HubKitError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from hubkit.pipeline import (
    FileField,
    HandlerConfig,
    HandlerContext,
    HttpRequest,
    HttpResponse,
    create_handler,
    create_health_handler,
)
from hubkit.security import JwtConfig, Principal, UserRole, create_token

__version__ = "0.1.0"

__all__ = [
    "BadRequestError",
    "ConflictError",
    "ContractCompiler",
    "ErrorCode",
    "FileField",
    "ForbiddenError",
    "HandlerConfig",
    "HandlerContext",
    "HttpRequest",
    "HttpResponse",
    "HubKitError",
    "InternalError",
    "JwtConfig",
    "NotFoundError",
    "OpenApiConfig",
    "Principal",
    "Route",
    "RouteBuilder",
    "RouteDefinition",
    "UnauthorizedError",
    "UserRole",
    "ValidationError",
    "__version__",
    "create_handler",
    "create_health_handler",
    "create_route_handler",
    "create_token",
]
