import argparse
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from config import load_config, configure_logging, CONFIG_DIR
from db.store import Store
from errors import DataImportError, InvalidGradeError, NotFoundError, ValidationError
from routes import decks, notes, cards, review, transfer  # Import routers

logger = logging.getLogger(__name__)

def open_store(config: dict) -> Store:
    return Store(
        config["database"]["path"],
        due_limit=config["review"]["due_limit"],
        random_pool=config["review"]["random_pool"],
    )

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load config and open the store unless one was injected
    config = load_config()
    configure_logging(config)
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = open_store(config)
        logger.info("Opened store at %s", config["database"]["path"])
    yield
    if owns_store:
        app.state.store.close()
        app.state.store = None

app = FastAPI(title="CardBox", description="Local-first spaced repetition flashcards", lifespan=lifespan)

# Include routers
app.include_router(decks.router, prefix="/decks", tags=["decks"])
app.include_router(notes.router, prefix="/notes", tags=["notes"])
app.include_router(cards.router, prefix="/cards", tags=["cards"])
app.include_router(review.router, prefix="/review", tags=["review"])
app.include_router(transfer.router, prefix="/transfer", tags=["transfer"])

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(DataImportError)
async def import_handler(request: Request, exc: DataImportError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(InvalidGradeError)
async def grade_handler(request: Request, exc: InvalidGradeError):
    logger.error("Invalid grade reached the scheduler: %r", exc.grade)
    return JSONResponse(status_code=422, content={"detail": str(exc)})

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="CardBox App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()
    if args.init:
        config = load_config()  # Ensures config is copied if missing
        open_store(config).close()
        print(f"DB initialized and config copied to {CONFIG_DIR}/")
        exit(0)
    # Run server
    uvicorn.run("main:app", host="127.0.0.1", port=args.port, reload=args.dev, log_level="info")
