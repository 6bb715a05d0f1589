"""Run the API with uvicorn: `python -m pgbridge`."""
import uvicorn

from pgbridge.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "pgbridge.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
