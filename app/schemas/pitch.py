"""Pydantic schemas for pitch generation requests and responses.

Request fields are typed ``Any`` on purpose: type and content checks belong
to the input validators, which return the user-facing error messages.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GeneratePitchRequest(BaseModel):
    """Body of a suggestion / pitch generation request."""

    type: Any = Field(default=None, description="Generation type, e.g. 'problems'.")
    idea: Any = Field(default=None, description="Pitch idea (max 500 chars).")
    context: Any = Field(
        default=None,
        description="Answers from previous wizard steps (flat object, one nested level).",
    )


class GeneratePitchResponse(BaseModel):
    type: str
    result: dict[str, Any]


class GenerateScriptRequest(BaseModel):
    """Body of a full script generation request."""

    model_config = ConfigDict(populate_by_name=True)

    track: Any = Field(default=None, description="Audience track, e.g. 'investor'.")
    duration: Any = Field(default=None, description="Speech length in minutes (1-30).")
    inputs: Any = Field(default=None, description="Wizard answers used to write the script.")
    hook_style: Any = Field(
        default="auto",
        alias="hookStyle",
        description="Opening style: auto, statistic, villain, story, contrarian or question.",
    )
    has_demo: Any = Field(default=False, alias="hasDemo")


class GenerateScriptResponse(BaseModel):
    track: str
    duration: int = Field(..., description="Rounded duration in minutes.")
    hook_style: str
    target_word_count: int
    script: dict[str, Any]
