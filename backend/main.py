# backend/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from config import settings
from database import init_db

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Router imports
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.logs import router as logs_router
from routes.units import router as units_router
from routes.functions import router as functions_router
from routes.accommodations import router as accommodations_router
from routes.rooms import router as rooms_router
from routes.employees import router as employees_router
from routes.products import router as products_router
from routes.movements import router as movements_router
from routes.invoices import router as invoices_router
from routes.transfers import router as transfers_router
from routes.dashboard import router as dashboard_router
from routes.reports import router as reports_router
from routes.inspections import router as inspections_router
from routes.work_logs import router as work_logs_router

# Initialisation
init_db()

app = FastAPI(title="Dormitory Back-office API", version="1.0.0")

# CORS: local Vite dev server plus the configured front-end
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(logs_router)
app.include_router(units_router)
app.include_router(functions_router)
app.include_router(accommodations_router)
app.include_router(rooms_router)
app.include_router(employees_router)
app.include_router(products_router)
app.include_router(movements_router)
app.include_router(invoices_router)
app.include_router(transfers_router)
app.include_router(dashboard_router)
app.include_router(reports_router)
app.include_router(inspections_router)
app.include_router(work_logs_router)

@app.get("/")
def read_root():
    return {"message": "Dormitory Back-office API is running"}
