import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT, RELOAD
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app
from logging_config import get_logger

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info(f"Listening on port {PORT}")
    # reload needs an import string so the worker can re-import the app
    uvicorn.run("app:app" if RELOAD else app, host=HOST, port=PORT, reload=RELOAD, log_config=None)
