"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from strands.config import settings
from strands.database import Base, engine
from strands.errors import StrandsError

# Import routers
from strands.routers import friends, groups, media, users
from strands.routers import strands as strand_routes

# Import all models so Base.metadata knows about them
from strands.models.user import User                      # noqa: F401
from strands.models.friendship import Friendship          # noqa: F401
from strands.models.group import Group, GroupMember, GroupInvite, GroupReadStatus  # noqa: F401
from strands.models.media import Media                    # noqa: F401
from strands.models.strand import Strand, StrandMedia, StrandShare, StrandPin, StrandFire  # noqa: F401
from strands.models.comment import StrandComment          # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Strands",
    description="Group-based social sharing: friends, private groups, shared strands, pins and fires",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StrandsError)
async def strands_error_handler(request: Request, exc: StrandsError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(friends.router, prefix="/api/friends", tags=["Friends"])
app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])
app.include_router(strand_routes.router, prefix="/api/strands", tags=["Strands"])
app.include_router(media.router, prefix="/api/media", tags=["Media"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
