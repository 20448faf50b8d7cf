from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing import List, Optional


class CompileCommand(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    directory: str
    command: str
    file: str = Field(description="Source file; unique key in the merged database")
    output: Optional[str] = None


CompileCommands = TypeAdapter(List[CompileCommand])
