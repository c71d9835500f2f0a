from datetime import datetime, timezone
from fastapi import FastAPI
from storefront.core.logging import setup_logging
from storefront.dependencies.catalog import close_catalog_client
from storefront.middleware.metrics import MetricsMiddleware, new_metrics
from storefront.routes import system
from storefront.routes.products import router as product_router
from storefront.routes.discounts import router as discount_router
from storefront.routes.categories import router as category_router

setup_logging()

app = FastAPI(title="Storefront Pricing Service")

app.add_middleware(MetricsMiddleware)


app.include_router(product_router)
app.include_router(discount_router)
app.include_router(category_router)
app.include_router(system.router)

@app.on_event("startup")
async def startup_event():
    app.state.start_time = datetime.now(timezone.utc)
    app.state.metrics = new_metrics()


@app.on_event("shutdown")
def shutdown_event():
    close_catalog_client()
