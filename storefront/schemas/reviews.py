"""Request/response schemas for product reviews."""

from datetime import datetime

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    product_id: int = Field(..., ge=1)
    text: str = Field(..., min_length=1, max_length=5000)
    rating: int = Field(..., ge=1, le=5, description="Rating between 1 and 5")


class ReviewUpdate(BaseModel):
    text: str | None = Field(default=None, min_length=1, max_length=5000)
    rating: int | None = Field(default=None, ge=1, le=5)


class ReviewOut(BaseModel):
    id: int
    product_id: int
    user_id: int
    username: str | None = None
    text: str
    rating: int
    created_at: datetime | None = None


class ProductRating(BaseModel):
    product_id: int
    average_rating: float | None
    total_reviews: int
