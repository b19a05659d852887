import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config
from routes import library, cards, review, stats  # Import routers

logger = logging.getLogger(__name__)

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    load_config()  # Ensures config exists
    init_db()
    logger.info("ReadCompanion database ready")
    yield

app = FastAPI(
    title="ReadCompanion",
    description="Spaced-repetition review for flashcards generated from reading notes",
    lifespan=lifespan,
)

# Include routers
app.include_router(library.router, tags=["library"])  # /books, /chapters
app.include_router(cards.router, prefix="/cards", tags=["cards"])
app.include_router(review.router, prefix="/review", tags=["review"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="ReadCompanion review service")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    log_level = config["logging"]["level"]
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.readcompanion/")
        exit(0)
    uvicorn.run("main:app", host="127.0.0.1", port=args.port, reload=args.dev, log_level=log_level)
