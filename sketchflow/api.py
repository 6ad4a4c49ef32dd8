"""
Sketchflow HTTP API - FastAPI Application

Stateless endpoints over the core:
- Compile quick DSL into a document
- Validate arbitrary JSON against the file format
- Build single elements from partial input
"""
import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from . import __version__, config
from .core.compiler import compile_parsed
from .core.dsl import EmptyDiagramError, parse_quick_dsl
from .core.elements import InvalidElementError, create_element, validate_element_input
from .core.validation import apply_strict, validate_document
from .log import setup_logging

logger = logging.getLogger(__name__)


# --- FastAPI App ---

app = FastAPI(
    title="Sketchflow API",
    description="Compile quick diagram notation and validate Excalidraw documents",
    version=__version__,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


# --- Compile ---

class QuickRequest(BaseModel):
    dsl: str
    direction: str = "horizontal"
    spacing: float = 100
    style: str = "default"


@app.post("/api/quick")
async def quick_diagram(request: QuickRequest):
    """Compile quick DSL into a complete document."""
    try:
        nodes, edges = parse_quick_dsl(request.dsl)
        document = compile_parsed(
            nodes,
            edges,
            direction=request.direction,
            spacing=request.spacing,
            style=request.style,
        )
    except (EmptyDiagramError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    document.source = config.DOCUMENT_SOURCE
    return {
        "success": True,
        "nodeCount": len(nodes),
        "connectionCount": len(edges),
        "document": document.to_json_dict(),
    }


# --- Validation ---

@app.post("/api/validate")
async def validate(
    data: Any = Body(...),
    strict: Optional[bool] = Query(default=False),
):
    """Validate any JSON body as a document; problems are reported, never raised."""
    result = validate_document(data)
    if strict:
        result = apply_strict(result)
    return result.to_dict()


# --- Elements ---

@app.post("/api/elements")
async def build_element(data: Any = Body(...)):
    """Create a fully-defaulted element from partial input."""
    try:
        validate_element_input(data)
        element = create_element(data)
    except (InvalidElementError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "element": element.to_json_dict()}


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    logger.info("Starting Sketchflow API on %s:%d", config.API_HOST, config.API_PORT)
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
