"""
Dynamoscan FastAPI Application entry point.

    uvicorn dynamoscan.main:app
"""

from .api.app import create_application
from .core.config import settings

app = create_application()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dynamoscan.main:app", host=settings.HOST, port=settings.PORT)
