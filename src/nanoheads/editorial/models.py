"""Domain models for analyses, their review state, and provider settings."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AnalysisStatus(str, Enum):
    """Lifecycle states of a stored analysis."""

    DRAFT = "draft"
    PENDING = "pending"
    COMPLETED = "completed"


class FactSource(str, Enum):
    AI = "ai"
    MANUAL = "manual"


class RecordNotFoundError(LookupError):
    """Requested row does not exist."""


@dataclass(slots=True)
class PhaseOneInput:
    """Analyse request: text wins over URL."""

    text: str = ""
    url: str = ""
    language: str = ""
    category: str = ""


@dataclass(slots=True)
class PhaseOneResult:
    article_id: int
    language: str
    facts: list[str]
    gaps: list[str]
    article: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PublishOptions:
    """Freshly generated headline/strapline options for one analysis."""

    article_id: int
    language: str
    headlines: list[HeadlineOption]
    straplines: list[StraplineOption]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class AnalysisListItem:
    id: int
    title: str
    category: str
    status: str
    created_at: datetime


@dataclass(slots=True)
class AnalysisFact:
    id: int
    text: str
    included: bool
    confirmed: bool
    source: str


@dataclass(slots=True)
class AnalysisGap:
    id: int
    text: str
    selected: bool
    resolved: bool


@dataclass(slots=True)
class HeadlineOption:
    id: int
    text: str
    selected: bool


@dataclass(slots=True)
class StraplineOption:
    id: int
    text: str
    selected: bool


@dataclass(slots=True)
class AnalysisDetail:
    """Full review view of one analysis."""

    id: int
    title: str
    category: str
    status: str
    source_url: str
    raw_text: str
    article_text: str
    created_at: datetime
    facts: list[AnalysisFact] = field(default_factory=list)
    gaps: list[AnalysisGap] = field(default_factory=list)
    headlines: list[HeadlineOption] = field(default_factory=list)
    straplines: list[StraplineOption] = field(default_factory=list)
    headline_selected: str = ""
    strapline_selected: str = ""
    slug: str = ""
    meta_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat()
        return payload


@dataclass(slots=True)
class DashboardSummary:
    total_analyses: int
    pending_review: int
    saved_articles: int
    ai_usage_pct: int
    ai_usage_text: str


@dataclass(slots=True)
class Dashboard:
    summary: DashboardSummary
    recent_analyses: list[AnalysisListItem]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": asdict(self.summary),
            "recent_analyses": [
                {**asdict(item), "created_at": item.created_at.isoformat()}
                for item in self.recent_analyses
            ],
        }


@dataclass(slots=True)
class ModelOption:
    id: int
    key: str
    name: str
    is_default: bool


@dataclass(slots=True)
class ProviderOption:
    id: int
    key: str
    name: str
    models: list[ModelOption] = field(default_factory=list)


@dataclass(slots=True)
class SettingsView:
    """Persisted provider/model choice plus the selectable catalog."""

    provider: str
    model: str
    updated_at: datetime | None
    providers: list[ProviderOption]


@dataclass(slots=True)
class RuntimeLlmSelection:
    provider: str
    model: str
