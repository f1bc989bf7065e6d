"""
Configuration module for the SareeStage try-on services
Contains logger setup and environment variables
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# -------------------------
# Logger Setup
# -------------------------
def setup_logger(
    name: str = __name__, log_file: Optional[str] = "sareestage.log"
) -> logging.Logger:
    """
    Set up and return a logger with both file and console handlers

    Args:
        name: Logger name (usually __name__)
        log_file: Path to log file, or None to log to the console only

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


# Create the main application logger
logger = setup_logger("sareestage", os.getenv("LOG_FILE") or None)

# -------------------------
# Environment Variables
# -------------------------
DEFAULT_ALLOWED_ORIGINS = [
    "https://sareestage-v2-887514490287.us-west1.run.app",
    "http://localhost:3000",
    "http://localhost:5173",
]
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

GEMINI_KEY = os.getenv("GEMINI_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "120"))

# edge relay
BACKEND_URL = os.getenv("BACKEND_URL")
RELAY_TIMEOUT = float(os.getenv("RELAY_TIMEOUT", "180"))
RELAY_ALLOW_CREDENTIALS = os.getenv("RELAY_ALLOW_CREDENTIALS", "false").lower() in {
    "1",
    "true",
    "yes",
}

PORT = int(os.getenv("PORT", "3001"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)))


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


ALLOWED_ORIGINS = _parse_origins(os.getenv("ALLOWED_ORIGINS"))


@dataclass
class Settings:
    """Runtime settings shared by the backend and the edge relay."""

    gemini_key: Optional[str] = GEMINI_KEY
    gemini_model: str = GEMINI_MODEL
    gemini_api_base: str = GEMINI_API_BASE
    gemini_timeout: float = GEMINI_TIMEOUT
    backend_url: Optional[str] = BACKEND_URL
    relay_timeout: float = RELAY_TIMEOUT
    relay_allow_credentials: bool = RELAY_ALLOW_CREDENTIALS
    allowed_origins: List[str] = field(default_factory=lambda: list(ALLOWED_ORIGINS))
    port: int = PORT
    max_upload_bytes: int = MAX_UPLOAD_BYTES

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_key=os.getenv("GEMINI_KEY") or os.getenv("API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", GEMINI_MODEL),
            gemini_api_base=os.getenv("GEMINI_API_BASE", GEMINI_API_BASE),
            gemini_timeout=float(os.getenv("GEMINI_TIMEOUT", str(GEMINI_TIMEOUT))),
            backend_url=os.getenv("BACKEND_URL"),
            relay_timeout=float(os.getenv("RELAY_TIMEOUT", str(RELAY_TIMEOUT))),
            relay_allow_credentials=RELAY_ALLOW_CREDENTIALS,
            allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGINS")),
            port=int(os.getenv("PORT", str(PORT))),
            max_upload_bytes=int(
                os.getenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))
            ),
        )


# Log configuration status
logger.info("Configuration loaded successfully")
logger.debug(f"GEMINI_KEY configured: {bool(GEMINI_KEY)}")
logger.debug(f"GEMINI_MODEL: {GEMINI_MODEL}")
logger.debug(f"BACKEND_URL configured: {bool(BACKEND_URL)}")
logger.debug(f"ALLOWED_ORIGINS: {ALLOWED_ORIGINS}")
logger.debug(f"PORT: {PORT}")
