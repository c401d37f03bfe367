from pydantic import BaseModel, ConfigDict, Field
from typing import List

class RankingEntry(BaseModel):
    rank: int = Field(ge=1, le=3)
    submission_id: str

    model_config = ConfigDict(from_attributes=True, frozen=True)

class SaveRankingsRequest(BaseModel):
    rankings: List[RankingEntry]

class CategoryCompletion(BaseModel):
    category_id: str
    all_reviewed: bool
    has_rankings: bool
    is_completed: bool
    can_complete: bool
