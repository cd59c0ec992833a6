"""
Serverless entry point for the TicketBuddy API
"""
import os

# Set environment variables for serverless
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("GITHUB_RESYNC_INTERVAL", "0")  # No scheduler in serverless

from mangum import Mangum
from ticketbuddy.main import app

# Lambda handler for the ASGI app; the lifespan sets up logging, the engine and tables
handler = Mangum(app, lifespan="auto")
