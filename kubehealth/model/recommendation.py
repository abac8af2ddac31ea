"""Recommendation models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Recommendation severity."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Recommendation(BaseModel):
    """A finding emitted by a rule group."""

    type: str
    severity: Severity
    title: str
    description: str
    action: str
    link: Optional[str] = None


class RuleGroupResult(BaseModel):
    """Outcome of one rule group: recommendations or a recorded failure."""

    group: str
    recommendations: List[Recommendation] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class AnalysisResult(BaseModel):
    """Results of every rule group in evaluation order."""

    groups: List[RuleGroupResult] = Field(default_factory=list)

    @property
    def recommendations(self) -> List[Recommendation]:
        recommendations = []
        for group in self.groups:
            recommendations.extend(group.recommendations)
        return recommendations

    @property
    def failed_groups(self) -> List[RuleGroupResult]:
        return [group for group in self.groups if group.failed]
