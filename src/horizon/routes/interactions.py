"""Interaction ingestion routes."""

import sqlite3

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator

from ..config import VALID_EVENT_TYPES
from ..logging_config import get_logger
from ..storage import record_interaction
from ..utils import parse_timestamp

logger = get_logger(__name__, namespace='api')

router = APIRouter(prefix="/api", tags=["interactions"])


class InteractionPayload(BaseModel):
    project: str
    timestamp: str
    machine: str
    agent: str
    session_id: str
    event_type: str

    @field_validator('*')
    @classmethod
    def not_empty(cls, value: str, info):
        if value == "":
            raise ValueError(f"Missing required field: {info.field_name}")
        return value

    @field_validator('timestamp')
    @classmethod
    def valid_timestamp(cls, value: str):
        try:
            parse_timestamp(value)
        except ValueError:
            raise ValueError("Invalid timestamp format. Use ISO 8601.")
        return value

    @field_validator('event_type')
    @classmethod
    def valid_event_type(cls, value: str):
        if value not in VALID_EVENT_TYPES:
            raise ValueError(
                f"Invalid event_type. Must be one of: {', '.join(VALID_EVENT_TYPES)}"
            )
        return value


@router.post("/interactions", status_code=201)
def post_interaction(payload: InteractionPayload):
    """Record an interaction from an AI coding agent.

    Resubmitting an already recorded event is accepted and ignored.

    Returns:
        {"status": "recorded"} with status 201
    """
    try:
        record_interaction(payload.model_dump())
    except sqlite3.Error as e:
        logger.error(
            f"Failed to record interaction on /api/interactions: "
            f"{type(e).__name__}: {e}"
        )
        raise HTTPException(500, "Internal server error")

    return {"status": "recorded"}
