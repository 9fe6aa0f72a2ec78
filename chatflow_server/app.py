"""FastAPI application for validating and storing chatbot flows."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatflow_server import config, flow_db
from chatflow_server.db import init_all
from chatflow_server.flow_routes import router as flow_router
from chatflow_server.log_config import configure_logging

configure_logging(config.LOG_LEVEL, config.LOG_JSON)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_all()
    yield


app = FastAPI(
    title="Chatflow API",
    description="API server for validating and storing chatbot conversation flows",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routes
app.include_router(flow_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.1.0",
        "flow_db": str(flow_db.FLOW_DB_PATH),
        "endpoints": {
            "flows": "/api/flows",
            "validate": "/api/flows/validate",
        },
    }


def main() -> None:
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
