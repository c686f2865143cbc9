"""
Transit Hub - Main Server

Freight-forwarding back office API: transit files and their milestone workflow.
Routes are organized in /routes/, business logic in /services/.
"""

from dotenv import load_dotenv
load_dotenv()  # Load .env file before any os.environ calls

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from services.transit_config import LOG_LEVEL, SERVICE_NAME, SERVICE_VERSION, get_cors_origins

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# ==================== ROUTERS ====================
from routes import auth, catalog, transit_files, dashboard

# ==================== SERVICES ====================
from services.transit_file_service import TransitFileService


# ==================== LIFESPAN ====================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting %s...", SERVICE_NAME)

    transit_file_service = TransitFileService()
    transit_files.set_service(transit_file_service)
    dashboard.set_service(transit_file_service)

    logger.info("%s started successfully", SERVICE_NAME)

    yield

    logger.info("Shutting down %s...", SERVICE_NAME)


# ==================== APP SETUP ====================
app = FastAPI(
    title=SERVICE_NAME,
    description="Transit file management and milestone tracking",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Router with /api prefix
api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router)
api_router.include_router(catalog.router)
api_router.include_router(transit_files.router)
api_router.include_router(dashboard.router)

app.include_router(api_router)


# ==================== ROOT ENDPOINTS ====================
@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running"
    }


@app.get("/api/health")
async def health():
    return {
        "status": "healthy",
        "service": "transit-hub"
    }
