import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from restopos.core.db import init_db, close_db
from restopos.api.v1.orders import router as orders_router
from restopos.api.v1.delivery import router as delivery_router
from restopos.api.v1.kitchen import router as kitchen_router
from restopos.api.v1.inventory import router as inventory_router
from restopos.api.v1.tables import router as tables_router
from restopos.api.v1.customers import router as customers_router
from restopos.core.config import APP_HOST, APP_PORT, PROJECT_NAME, VERSION
from restopos.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("restopos")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db()  # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Lifecycle"])
app.include_router(delivery_router, prefix="/api/v1/delivery", tags=["Delivery Dispatch"])
app.include_router(kitchen_router, prefix="/api/v1/kitchen", tags=["Kitchen Display"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory"])
app.include_router(tables_router, prefix="/api/v1/tables", tags=["Tables"])
app.include_router(customers_router, prefix="/api/v1/customers", tags=["Customers"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}


def run():
    """Console entry point: serves the API with uvicorn."""
    uvicorn.run("restopos.main:app", host=APP_HOST, port=APP_PORT)


if __name__ == "__main__":
    run()
