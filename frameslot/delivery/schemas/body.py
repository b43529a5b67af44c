from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from frameslot.domain.models import PrintSize, TemplateDefinition
from frameslot.domain.validator import Violation

class AnalyzeTemplateRequest(BaseModel):
    id: str
    filename: Optional[str] = None
    print_size: PrintSize = PrintSize.R4

    # PNG as base64 or data URL
    image: str

    # Cache key of the source image and its last-modified time; both are needed to use the cache
    source_id: Optional[str] = None
    last_modified: Optional[datetime] = None

class AnalyzeTemplateResponse(BaseModel):
    definition: TemplateDefinition
    warnings: List[str] = Field(default_factory=list)
    cached: bool = False

class ValidationFailedResponse(BaseModel):
    violations: List[Violation]
    warnings: List[str] = Field(default_factory=list)
