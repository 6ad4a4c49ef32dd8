"""
Runtime settings read from the environment.

Only the boundary layers (CLI, API, storage) read these; the core takes all
of its parameters as arguments.
"""

import os

LOG_LEVEL = os.environ.get("SKETCHFLOW_LOG_LEVEL", "WARNING")

API_HOST = os.environ.get("SKETCHFLOW_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("SKETCHFLOW_PORT", "8765"))

# Stamped into the `source` field of every written document
DOCUMENT_SOURCE = os.environ.get("SKETCHFLOW_SOURCE", "sketchflow")

# CORS for local frontend development
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]
