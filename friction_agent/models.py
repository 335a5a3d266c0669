from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SourceCategory = Literal["documentation", "reviews", "community", "help_center", "product"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(BaseModel):
    url: str | None = None
    debug: bool = False


class ExternalSource(_CamelModel):
    name: str
    category: SourceCategory
    data_points: int
    sentiment: float = Field(..., ge=-1, le=1)
    friction_mentions: list[str] = Field(default_factory=list)
    url: str
    summary: str


class DataCounts(_CamelModel):
    pages_analyzed: int = 0
    docs_found: int = 0
    reviews_scanned: int = 0
    reddit_threads: int = 0
    help_articles: int = 0
    nav_item_count: int = 0
    nav_depth: int | float = 1


class ReviewSentimentOut(_CamelModel):
    positive: int
    neutral: int
    negative: int


class PhaseStep(_CamelModel):
    page: str
    action: str
    difficulty: Literal["easy", "medium", "hard"]
    cognitive_score: int
    why_hard: str
    phase: str
    sources: list[str] = Field(default_factory=list)


class PhaseScore(_CamelModel):
    click_tax: int
    cognitive_load: int
    summary: str
    steps: list[PhaseStep] = Field(default_factory=list)


class Phases(_CamelModel):
    signup: PhaseScore
    onboarding: PhaseScore
    constant_use: PhaseScore = Field(..., alias="constant_use")


class MethodologyWeights(_CamelModel):
    navigation_complexity: float = 0.3
    documentation_volume: float = 0.2
    review_sentiment: float = 0.25
    template_availability: float = 0.25


class Methodology(_CamelModel):
    description: str = (
        "Scores calculated from navigation complexity, documentation volume, "
        "user reviews, and template availability."
    )
    weights: MethodologyWeights = Field(default_factory=MethodologyWeights)


class AnalyzeResponse(_CamelModel):
    success: Literal[True] = True
    url: str
    product_name: str

    # 0-100; click tax and cognitive load are "higher = worse", overall is "higher = simpler"
    click_tax_score: int = Field(..., ge=0, le=100)
    total_cognitive_load: int = Field(..., ge=0, le=100)
    overall_score: int = Field(..., ge=0, le=100)

    # placeholders until a real Lighthouse run is wired in
    lighthouse_performance: int
    lighthouse_accessibility: int

    external_sources: list[ExternalSource]
    documentation_score: float = Field(..., ge=0, le=100)
    community_health_score: int = Field(..., ge=0, le=100)
    review_sentiment: ReviewSentimentOut
    time_to_value_estimate: str
    data_counts: DataCounts
    phases: Phases
    recommendations: list[str] = Field(..., max_length=4)
    methodology: Methodology = Field(default_factory=Methodology)
    debug_info: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
