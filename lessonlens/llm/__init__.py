"""
LLM client, prompts and result cache for curriculum analysis.

Consumes extracted document text; the ingestion pipeline never depends on
this package.
"""

from .cache import ResultCache
from .client import AnalysisClient
from .models import (
    ChatMessage,
    CompletedAnalysis,
    CurriculumAnalysisRequest,
    CurriculumAnalysisResult,
    Recommendation,
    StandardGap,
    StudentPerformanceIssue,
)
from .pipeline import AnalysisPipeline
from .prompts import get_analysis_prompt, get_prompt_version

__all__ = [
    "ChatMessage",
    "CompletedAnalysis",
    "AnalysisClient",
    "AnalysisPipeline",
    "CurriculumAnalysisRequest",
    "CurriculumAnalysisResult",
    "Recommendation",
    "ResultCache",
    "StandardGap",
    "StudentPerformanceIssue",
    "get_analysis_prompt",
    "get_prompt_version",
]
