"""
VYBGO Backend
=============
Entry point. Run with: uvicorn main:app --reload
"""

import uvicorn

from vybgo.api.app import create_app
from vybgo.config import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
