from pydantic import BaseModel, Field
from typing import Literal


class DefinitionsConfig(BaseModel):
    path: str | None = None


class OutputConfig(BaseModel):
    format: Literal["table", "json"] = "table"
    show_levels: bool = False


class GrantlensConfig(BaseModel):
    definitions: DefinitionsConfig = Field(default_factory=DefinitionsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
