from pathlib import Path
import os
from dotenv import load_dotenv
import logging

# Load environment variables
load_dotenv()

class Config:
    # Base paths
    BASE_DIR = Path(__file__).resolve().parent
    UPLOAD_DIR = Path(os.path.expanduser(os.getenv("UPLOAD_DIR", "~/xml_to_xls_uploads")))
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
    LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", str(LOG_DIR / "converter.log"))
    AUDIT_LOG_FILE_PATH = os.getenv("AUDIT_LOG_FILE_PATH", str(LOG_DIR / "audit.log"))

    # Create necessary directories
    for directory in [UPLOAD_DIR, LOG_DIR]:
        directory.mkdir(parents=True, exist_ok=True)

    # API Settings
    API_V1_PREFIX = "/api/v1"
    PROJECT_NAME = "XML to Excel Converter"
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    SHOW_ERROR_DETAILS = os.getenv("SHOW_ERROR_DETAILS", "False").lower() == "true"

    # CORS
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

    # File Upload
    MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100"))
    ALLOWED_CONTENT_TYPES = {"text/xml", "application/xml"}
    UPLOAD_CHUNK_SIZE = 8192

    # Rate Limiting
    RATE_LIMIT_CALLS = int(os.getenv("RATE_LIMIT_CALLS", "100"))
    RATE_LIMIT_PERIOD = int(os.getenv("RATE_LIMIT_PERIOD", "60"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(20 * 1024 * 1024)))

    # Conversion
    MAX_NESTING_DEPTH = int(os.getenv("MAX_NESTING_DEPTH", "200"))
    COERCE_SCALARS = os.getenv("COERCE_SCALARS", "False").lower() == "true"
    # An empty value drops scalars that no repeated element carries
    METADATA_SHEET_NAME = os.getenv("METADATA_SHEET_NAME", "metadata") or None

    @classmethod
    def validate_content_type(cls, content_type: str) -> bool:
        """Validate that the declared media type is an XML type."""
        if not content_type:
            return False
        media_type = content_type.split(";")[0].strip().lower()
        return media_type in cls.ALLOWED_CONTENT_TYPES

    @classmethod
    def max_upload_bytes(cls) -> int:
        return cls.MAX_UPLOAD_SIZE_MB * 1024 * 1024

# Create singleton instance
config = Config()

log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(filename=config.LOG_FILE_PATH, level=log_level)
