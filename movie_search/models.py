from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalize import year_of


class Filters(BaseModel):
    """Optional constraints for the standard search; a missing field means no constraint."""

    model_config = ConfigDict(populate_by_name=True)

    max_runtime_minutes: Optional[float] = Field(None, alias="runtime", description="Maximum runtime in minutes")
    min_rating: Optional[float] = Field(None, alias="rating", description="Minimum IMDb rating")
    start_year: Optional[int] = Field(None, alias="startDate", description="Start of the release window")
    end_year: Optional[int] = Field(None, alias="endDate", description="End of the release window")
    genre: Optional[str] = Field(None, description="Exact genre, 'All' disables the filter")

    @field_validator("max_runtime_minutes", "min_rating", mode="before")
    @classmethod
    def _blank_means_absent(cls, value: Any) -> Any:
        # Form inputs left empty arrive as "".
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_year", "end_year", mode="before")
    @classmethod
    def _reduce_to_year(cls, value: Any) -> Optional[int]:
        return year_of(value)

    @property
    def year_range(self) -> Optional[Tuple[int, int]]:
        if self.start_year is None or self.end_year is None:
            return None
        return self.start_year, self.end_year


class SearchRequest(BaseModel):
    query: str = Field("", description="Search query text, may be empty")
    filters: Filters = Field(default_factory=Filters)

    @field_validator("filters", mode="before")
    @classmethod
    def _none_means_no_filters(cls, value: Any) -> Any:
        return {} if value is None else value


class TitleWeightSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field("", description="Search query text, may be empty")
    # Validated by the descriptor builder so non-numeric input maps to a 400, not a 422.
    title_weight: Any = Field(None, alias="titleWeight", description="Boost applied to title matches")


class Movie(BaseModel):
    id: str
    title: str
    year: Optional[int] = None
    plot: Optional[str] = None
    poster: Optional[str] = None
    runtime: Optional[int] = None
    rating: Optional[float] = None
    genres: List[str] = Field(default_factory=list)
    score: float = 0.0


class Pagination(BaseModel):
    total: int
    page: int
    pages: int


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    best_match: Optional[Movie] = Field(None, serialization_alias="bestMatch")
    movies: List[Movie]
    pagination: Pagination


class Suggestion(BaseModel):
    id: str
    title: str
    score: float


class AutocompleteResponse(BaseModel):
    suggestions: List[Suggestion]
