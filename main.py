"""
Run the ledger API with uvicorn.

    python main.py

Host, port and reload come from app.core.config (env vars or .env).
"""

import uvicorn

from app.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG and not settings.is_production,
    )
