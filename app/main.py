import logging

from fastapi import FastAPI
from app.core.config import LOG_LEVEL
from app.core.errors import register_exception_handlers
from app.db.base import Base, engine
from app.db.models import availability, booking, category, notification, review, user  # noqa: F401  register tables
from app.api.routes import availability as availability_router
from app.api.routes import bookings as bookings_router
from app.api.routes import review as review_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="MeetGo Booking API")
register_exception_handlers(app)

@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)

@app.get("/")
def root():
    return {"message": "MeetGo booking API running"}


app.include_router(availability_router.router)
app.include_router(bookings_router.router)
app.include_router(review_router.router)
