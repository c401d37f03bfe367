from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime

MediaType = Literal["video", "photo"]

class RatingTier(BaseModel):
    tier: int
    label: str
    min_score: int
    max_score: int

class SubmissionForReview(BaseModel):
    id: str
    media_type: MediaType = "photo"
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    status: str = "submitted"
    submitted_at: Optional[datetime] = None
    participant_code: str
    review_id: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

class ScoreRecord(BaseModel):
    submission_id: str
    rating: Optional[int] = None
    feedback: str = ""

    model_config = ConfigDict(frozen=True)

class ReviewUpsertRequest(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=10)
    feedback: str = ""

class ReviewDisplay(BaseModel):
    id: str
    submission_id: str
    judge_id: str
    rating: Optional[int]
    feedback: Optional[str]

    model_config = ConfigDict(from_attributes=True)

class ReviewProgress(BaseModel):
    total: int
    reviewed: int
    pending: int
    percentage: int

class SubmissionsForReviewResponse(BaseModel):
    items: List[SubmissionForReview]
    progress: ReviewProgress
