import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config import Config
from database import engine, Base
from errors import register_error_handlers

# --- IMPORT ROUTERS (APIs) ---
from routers import events, records, transactions, installments, auth, verify, dashboard

# --- IMPORT MODELS (tables register on Base) ---
from models.students import Student
from models.events import Event
from models.transactions import Transaction, TransactionEvent, ReceiptCounter
from models.installments import Installment
from models.users import User

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)

app = FastAPI(title=Config.APP_NAME)

# ==========================================
# ✅ ERROR ENVELOPE
# ==========================================
register_error_handlers(app)

# ==========================================
# ✅ CORS MIDDLEWARE (front end allowed)
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- REGISTER ROUTERS ---
app.include_router(events.router)
app.include_router(records.router)
app.include_router(transactions.router)
app.include_router(installments.router)
app.include_router(auth.router)
app.include_router(verify.router)
app.include_router(dashboard.router)

logger.info("%s started (database: %s)", Config.APP_NAME, engine.url.render_as_string(hide_password=True))


@app.get("/")
def health():
    return {"success": True, "app": Config.APP_NAME}
