# File: backend/vbodegas/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from vbodegas.core.config import settings
from vbodegas.api.api import api_router
from vbodegas.db.database import engine
from vbodegas.db import models
from vbodegas.services.contract_errors import ContractError
from vbodegas.services.storage import ensure_output_dir

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize database more safely
def init_db():
    try:
        logger.info("Creating database tables if they don't exist...")
        for table in models.Base.metadata.sorted_tables:
            try:
                table.create(engine, checkfirst=True)
            except Exception as e:
                logger.error(f"Error creating table {table.name}: {e}")

        logger.info("Database initialization completed.")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

# Initialize database and output directory
init_db()
ensure_output_dir()

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION
)

# Configure CORS with settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configuration errors raised outside an endpoint body (e.g. a bad layout file)
@app.exception_handler(ContractError)
async def contract_error_handler(request: Request, exc: ContractError):
    logger.error(f"[CONTRACT] {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

# Include API router
app.include_router(api_router)

@app.get("/")
def read_root():
    return {"status": "VBodegas API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
