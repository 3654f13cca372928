"""
Pydantic models for LLM input/output.
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the model is prompted with."""

    model_config = ConfigDict(populate_by_name=True)


class StandardGap(_CamelModel):
    """A standard that the curriculum covers insufficiently."""

    standard_code: str = Field(..., alias="standardCode")
    standard_description: str = Field(..., alias="standardDescription")
    coverage: float = Field(..., ge=0, le=100, description="Coverage percentage (0-100)")
    alignment: Literal["Strong", "Moderate", "Weak"]
    gap_details: str = Field(..., alias="gapDetails")
    affected_questions: List[str] = Field(default_factory=list, alias="affectedQuestions")


class StudentPerformanceIssue(_CamelModel):
    """A weakness visible in student responses."""

    issue: str
    related_standards: List[str] = Field(default_factory=list, alias="relatedStandards")
    affected_questions: List[str] = Field(default_factory=list, alias="affectedQuestions")
    description: str


class Recommendation(_CamelModel):
    """A suggested change to improve alignment or instruction."""

    recommendation: str
    target_standards: List[str] = Field(default_factory=list, alias="targetStandards")
    priority: Literal["High", "Medium", "Low"]
    description: str


class CurriculumAnalysisResult(_CamelModel):
    """LLM output schema for a curriculum gap analysis."""

    standards_gaps: List[StandardGap] = Field(default_factory=list, alias="standardsGaps")
    student_performance_issues: List[StudentPerformanceIssue] = Field(
        default_factory=list, alias="studentPerformanceIssues"
    )
    recommendations: List[Recommendation] = Field(default_factory=list)
    overall_summary: str = Field(..., alias="overallSummary")


class CurriculumAnalysisRequest(BaseModel):
    """Context provided to the LLM for analysis."""

    grade_level: str
    subject_area: str
    unit_of_study: str
    lesson_contents: List[str]
    assessment_content: str = ""
    student_responses: str = ""


class CompletedAnalysis(BaseModel):
    """A finished analysis together with the request that produced it."""

    request: CurriculumAnalysisRequest
    result: CurriculumAnalysisResult


class ChatMessage(_CamelModel):
    """One turn of a follow-up conversation about an analysis."""

    content: str
    is_user: bool = Field(..., alias="isUser")
