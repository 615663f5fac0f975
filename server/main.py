import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from server.config import config
from server.database import init_database
from server.routes import router
from server.routes.prometheus import metrics_middleware
from reminder_worker.stores import StoreUnavailable

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# =========================================================
# FASTAPI APP
# =========================================================

app = FastAPI(title="Daily Task Reminder API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],      # IMPORTANT – allows OPTIONS
    allow_headers=["*"],
)

# Register Prometheus middleware
app.middleware("http")(metrics_middleware)

# Include API Router
app.include_router(router)

@app.get("/health")
def health():
    return {"status": "ok"}

@app.exception_handler(StoreUnavailable)
@app.exception_handler(SQLAlchemyError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.warning(f"⚠️ Store unavailable on {request.url.path}: {exc}")
    return JSONResponse({"detail": "Store unavailable"}, status_code=503)

# =========================================================
# AUTO-CREATE TABLES ON STARTUP
# =========================================================
@app.on_event("startup")
def create_tables():
    logger.info("🔄 Creating database tables if not exist...")
    init_database()
