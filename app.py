from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from constants import LOG_FILE, LOG_LEVEL
from dispatch import MessageRouter
from logging_config import get_logger, setup_logging
from routers.relay import relay_router

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Build the relay application with its own, empty relay state."""
    application = FastAPI(title="Presence Relay")

    # Configure CORS to allow all origins
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rooms and party bindings live only in this process
    application.state.message_router = MessageRouter()
    application.include_router(relay_router)
    return application


app = create_app()

logger.info("FastAPI application initialized")
