import uvicorn
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()


def main():
    # Get configuration from environment variables
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("DEBUG", "False").lower() == "true"
    workers = int(os.getenv("WORKERS", "1"))

    # Run the FastAPI application using Uvicorn
    uvicorn.run(
        "xml_to_xls.app:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level="info",
        ssl_keyfile=os.getenv("SSL_KEYFILE"),
        ssl_certfile=os.getenv("SSL_CERTFILE")
    )


if __name__ == "__main__":
    main()
