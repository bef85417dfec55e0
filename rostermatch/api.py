from __future__ import annotations

"""
FastAPI application for roster matching.

- POST /match-students: reconcile uploaded filenames with a class roster
- GET  /health

Shape problems in the body are a 400 naming the field; anything that goes
wrong inside the matcher is a generic 500 with no partial match list.
"""

import sys
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config import LOG_LEVEL, HealthResponse, MatchResponse
from .matching import InputShapeError, match_request, parse_match_request


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)
    logger.info("Roster matcher ready (log level {})", LOG_LEVEL)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/match-students", response_model=MatchResponse)
def match_students(payload: Any = Body(...)) -> MatchResponse:
    try:
        req = parse_match_request(payload)
    except InputShapeError as e:
        logger.warning("Rejected match request: {} ({})", e, e.field)
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return match_request(req)
    except Exception:
        logger.exception("Match students API error")
        raise HTTPException(status_code=500, detail="Internal server error")


# -----------------------
# CLI convenience
# -----------------------

def match_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Same contract as the HTTP route, returning the camelCase JSON dict."""
    return match_request(parse_match_request(payload)).model_dump(by_alias=True)
