# app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, facility_engine
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from shared.models import user_profiles
from .models.parking import parking_spaces, reservations, reservation_claims
from .router.parking import spaces_router, reservations_router
from .router.user import profile_router
from .router.admin import user_management_router, reservation_admin_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# Create all tables
Base.metadata.create_all(bind=facility_engine)

app = FastAPI(title="Parking Reservation Service API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(JsonResponseMiddleware)

setup_exception_handlers(app)

# Include routers
app.include_router(spaces_router.router)
app.include_router(reservations_router.router)
app.include_router(profile_router.router)
app.include_router(user_management_router.router)
app.include_router(reservation_admin_router.router)


@app.get("/api/parking/health")
def health():
    return {"status": "healthy"}
