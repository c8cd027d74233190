from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.app_config import CORS_ORIGINS, PROJECT_NAME
from app.core.exception_handlers import register_exception_handlers
from app.core.logging_config import setup_logging
from app.database.db import Base, engine
from app.models import bookings, events, users  # noqa: F401  (register tables)
from app.routes import auth, health, reports
from app.routes import bookings as booking_routes
from app.routes import events as event_routes

setup_logging()

app = FastAPI(title=PROJECT_NAME)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(auth.router)
app.include_router(event_routes.router)
app.include_router(booking_routes.router)
app.include_router(reports.router)
app.include_router(health.router)
