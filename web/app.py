"""
FastAPI application setup for the decision workshop API.
"""

from dotenv import load_dotenv
from fastapi import FastAPI

from . import __version__ as WEB_VERSION
from .routes import router

# Load .env file (if present) so WORKSHOP_* settings are available via os.environ
load_dotenv()

# App
app = FastAPI(
    title="decision-workshop",
    description="Coordination core for facilitated problem-framing and voting workshops",
    version=WEB_VERSION,
)

# Include API routes
app.include_router(router)
