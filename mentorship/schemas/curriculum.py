from pydantic import BaseModel, Field
from typing import List


class CurriculumEntry(BaseModel):
    id: int
    platform: str
    practice_links: List[str] = Field(default_factory=list, alias="practiceLinks")
    resource_links: List[str] = Field(default_factory=list, alias="resourceLinks")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }
