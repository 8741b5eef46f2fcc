"""
Serverless entry point for the Bank Feedback Triage API
"""
import os

# Set environment variables for serverless
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("DETECTION_INTERVAL_SECONDS", "0")  # Disable sweep scheduler in serverless

from mangum import Mangum

from feedback_triage.infrastructure.database import init_database
from feedback_triage.main import app

# Lifespan is off, so the engine is created here; rules fall back to the
# built-in defaults and the LLM is not used
init_database()

# Lambda handler for ASGI app (disable lifespan for serverless)
handler = Mangum(app, lifespan="off")
