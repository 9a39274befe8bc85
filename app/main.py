from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from app.core import config
from app.core.database.engine import AsyncSessionLocal, init_db
from app.core.exceptions import AccessLayerError
from app.features.permissions.cache import TTLRoleCache
from app.features.permissions.policy import install_policy, load_policy_file
from app.features.permissions.resolver import RoleResolver, SqlRoleBindingStore
from app.features.permissions.routes import router as permission_router
from app.features.records.registry import ResourceRegistry
from app.features.records.routes import router as record_router
from app.features.users.dependencies import get_authorization_header
from app.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Ops Platform Access Layer",
    description="Permission-scoped data access for the CRM/ATS/HR/Ops platform",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
limiter = Limiter(key_func=get_authorization_header)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.app.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(AccessLayerError)
async def access_layer_exception_handler(_request: Request, exc: AccessLayerError):
    if exc.status_code >= 500:
        log.warning("%s: %s", exc.__class__.__name__, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database, policy matrix, resource registry and role resolver."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")

    if config.POLICY_FILE:
        install_policy(load_policy_file(config.POLICY_FILE))

    app.state.resource_registry = ResourceRegistry.build()
    app.state.role_resolver = RoleResolver(
        SqlRoleBindingStore(AsyncSessionLocal),
        TTLRoleCache(),
        ttl=config.ROLE_CACHE_TTL_SECONDS,
    )
    log.info("Role cache TTL set to %ss", config.ROLE_CACHE_TTL_SECONDS)


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "Ops Platform Access Layer",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Protected endpoints require Bearer token in Authorization header",
            "protected_endpoints": ["/records/*", "/permissions/*"],
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Generic permission-scoped record routes
app.include_router(record_router, prefix="/records", tags=["records"])

# Access introspection routes
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])
