"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cashplan.config import settings
from cashplan.database import init_db
from cashplan.forecast import routes as forecast_routes
from cashplan.routes import entries as entry_routes
from cashplan.routes import obligations as obligation_routes
from cashplan.routes import planner as planner_routes
from cashplan.scenarios import routes as scenario_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title="Cashplan API",
    description="Cash-flow planning: budget entries, obligations, scenarios and projected positions",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(planner_routes.router, prefix=settings.API_V1_PREFIX, tags=["Planner"])
app.include_router(entry_routes.router, prefix=settings.API_V1_PREFIX, tags=["Entries"])
app.include_router(obligation_routes.router, prefix=settings.API_V1_PREFIX, tags=["Obligations"])
app.include_router(forecast_routes.router, prefix=f"{settings.API_V1_PREFIX}/forecast", tags=["Forecast"])
app.include_router(scenario_routes.router, prefix=f"{settings.API_V1_PREFIX}/scenarios", tags=["Scenarios"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Cashplan API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cashplan.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
