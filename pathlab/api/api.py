from fastapi import APIRouter

from pathlab.api.auth import routes as auth
from pathlab.api.catalog import routes as catalog
from pathlab.api.payments import routes as payments
from pathlab.api.bookings import routes as bookings
from pathlab.api.reports import routes as reports
from pathlab.api.admin import routes as admin
from pathlab.api.reviews import routes as reviews
from pathlab.api.advertisements import routes as advertisements

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(catalog.router)
api_router.include_router(payments.router)
api_router.include_router(bookings.router)
api_router.include_router(reports.router)
api_router.include_router(admin.router)
api_router.include_router(reviews.router)
api_router.include_router(advertisements.router)
