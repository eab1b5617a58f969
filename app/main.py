import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import config
from app.core.db.engine import check_database_connection
from app.core.error_handler import global_exception_handler
from app.core.response_interceptor import SuccessResponseInterceptor
from app.modules.users import router as users_router
from app.modules.categories.router import router as categories_router
from app.modules.products.router import router as products_router
from app.modules.orders.router import router as orders_router
from app.modules.dashboard.router import router as dashboard_router

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)
logger.info("Starting Storefront API...")

app = FastAPI(
    title="Storefront API",
    description="Store catalog, checkout and admin analytics API",
    version="1.0.0",
)

# Add global exception handler
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Success Response Interceptor (must be added after CORS)
app.add_middleware(SuccessResponseInterceptor)

# Include routers with /api prefix
app.include_router(users_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(products_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    database_ok = await check_database_connection()
    return {"status": "ok" if database_ok else "degraded", "database": database_ok}
