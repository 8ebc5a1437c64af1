from typing import Any, Dict, List

from pydantic import BaseModel, Field


class DigestRunOut(BaseModel):
    success: bool = Field(True, description="The run itself completed")
    results: List[Dict[str, Any]] = Field(default_factory=list, description="One outcome per user")
