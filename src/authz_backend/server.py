import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authz_backend.api.exceptions import register_exception_handlers
from authz_backend.api.groups import groups_router
from authz_backend.api.resources import resources_router
from authz_backend.api.user import user_router
from authz_backend.api.users import users_router
from authz_backend.database import get_engine, get_session_factory
from authz_backend.model import Base
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.route_config import get_route_permission_config
from authz_backend.seeder import seed
from authz_backend.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def startup_logic():

    if settings.AUTO_CREATE_SCHEMA:
        Base.metadata.create_all(get_engine())
        logger.info("Database schema ensured")

    get_route_permission_config()

    if settings.DEBUG_MODE == "production":
        db = get_session_factory()()
        try:
            seed(db, settings.SEED_CONFIG)
        finally:
            db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    startup_logic()
    yield

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

register_exception_handlers(app)

app.include_router(
    user_router,
    prefix="/user",
    tags=["user"],
    dependencies=[Depends(get_current_principal)]
)

app.include_router(
    users_router,
    prefix="/users",
    tags=["users", "permissions"],
    dependencies=[Depends(get_current_principal)]
)

app.include_router(
    groups_router,
    prefix="/groups",
    tags=["groups", "permissions"],
    dependencies=[Depends(get_current_principal)]
)

app.include_router(
    resources_router,
    prefix="/resources",
    tags=["resources"],
    dependencies=[Depends(get_current_principal)]
)
