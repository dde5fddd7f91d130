"""FastAPI main application for the Exploding Kittens backend"""

import logging
import os

from .ws.server import app, room_manager

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "info").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@app.get("/")
async def root():
    return {"message": "Exploding Kittens API", "version": "1.0.0", "rooms": len(room_manager)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
