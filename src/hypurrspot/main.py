"""HypurrSpot - Main application entry point."""

import uvicorn

from hypurrspot.api.app import create_app
from hypurrspot.config import get_settings

# Create the app instance
app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "hypurrspot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
