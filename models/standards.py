"""
Central standards models for Stagebot.

The service can host the central standards document itself: one current
version plus an archived copy of every version it replaced.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .rules import RuleConfig

CURRENT_ROW_KEY = "current"


class StandardsRecord(BaseModel):
    """
    A stored version of a standards document.

    Table design:
    - standard_id = which document (one organization-wide document by default)
    - row_key = "current" for the live version, "v{n}" for archived ones
    """

    model_config = ConfigDict(frozen=True)

    standard_id: str = Field(..., description="Standards document identifier")
    row_key: str = Field(..., description="'current' or 'v{version}'")
    version: int = Field(..., ge=0)
    yaml_content: str = Field(default="")
    updated_by: str = Field(default="")
    change_description: str = Field(default="")
    updated_at: Optional[datetime] = Field(None)

    @property
    def is_current(self) -> bool:
        return self.row_key == CURRENT_ROW_KEY


class StandardsUpdateRequest(BaseModel):
    """New standards document submitted by an administrator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    yaml_content: Optional[str] = Field(None, description="Full YAML rule document")
    updated_by: Optional[str] = Field(None, description="Who made the change")
    change_description: Optional[str] = Field(None, description="What changed and why")


class StandardsDocument(BaseModel):
    """
    A standards version as served over HTTP.

    yaml_content makes the response usable as a central standards URL.
    """

    yaml_content: str
    version: int = Field(..., description="0 when serving the embedded defaults")
    updated_by: str = ""
    change_description: str = ""
    updated_at: Optional[datetime] = None
    parsed_config: Optional[RuleConfig] = Field(
        None, description="The document as parsed now; null if it no longer parses"
    )


class StandardsHistoryEntry(BaseModel):
    """One row of the standards version history (no document body)."""

    version: int
    row_key: str
    updated_by: str = ""
    change_description: str = ""
    updated_at: Optional[datetime] = None
    is_current: bool = False
