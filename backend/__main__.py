"""
Entry point for running the application with `python -m backend`.
"""
import uvicorn

from backend.settings import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("backend.main:app", host="0.0.0.0", port=settings.port, reload=settings.is_development)
