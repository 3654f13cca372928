"""
Analysis pipeline for curriculum documents.

Sorts extracted documents into lessons, assessments and student responses
by filename, builds the analysis request and calls the LLM client, with
results kept in an injected cache. Follow-up questions read the
cached analysis back as prompt context.
"""

import logging
from typing import Dict, Hashable, List, Optional, Sequence

from ..config import LessonLensSettings
from ..errors import AnalysisError, ErrorKind, MissingDocumentsError
from ..models import DocumentRecord
from .cache import ResultCache
from .client import AnalysisClient
from .models import ChatMessage, CompletedAnalysis, CurriculumAnalysisRequest, CurriculumAnalysisResult

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "lesson": ["lesson"],
    "assessment": ["assessment", "test", "exam"],
    "student response": ["response", "result", "answer"],
}


class AnalysisPipeline:
    """Pipeline for analyzing extracted curriculum documents."""

    def __init__(
        self,
        config: LessonLensSettings,
        client: Optional[AnalysisClient] = None,
        cache: Optional[ResultCache] = None,
    ):
        """Initialize the analysis pipeline."""
        self.config = config
        self.client = client or AnalysisClient(config)
        self.cache = cache if cache is not None else ResultCache.from_settings(config.cache)

    @staticmethod
    def categorize(records: Sequence[DocumentRecord]) -> Dict[str, List[DocumentRecord]]:
        """Group records by filename keywords. A file may land in several groups."""
        groups: Dict[str, List[DocumentRecord]] = {category: [] for category in CATEGORY_KEYWORDS}
        for record in records:
            name = record.name.lower()
            for category, keywords in CATEGORY_KEYWORDS.items():
                if any(keyword in name for keyword in keywords):
                    groups[category].append(record)
        return groups

    def build_request(
        self,
        records: Sequence[DocumentRecord],
        grade_level: str,
        subject_area: str,
        unit_of_study: str,
    ) -> CurriculumAnalysisRequest:
        """
        Build an analysis request from extracted documents.

        Raises:
            MissingDocumentsError: if lessons, assessments or responses are absent
        """
        groups = self.categorize(records)
        for category, members in groups.items():
            if not members:
                raise MissingDocumentsError(category)

        return CurriculumAnalysisRequest(
            grade_level=grade_level,
            subject_area=subject_area,
            unit_of_study=unit_of_study,
            lesson_contents=[r.extracted_text for r in groups["lesson"]],
            assessment_content="\n\n".join(r.extracted_text for r in groups["assessment"]),
            student_responses="\n\n".join(r.extracted_text for r in groups["student response"]),
        )

    def analyze(self, analysis_id: Hashable, request: CurriculumAnalysisRequest) -> CurriculumAnalysisResult:
        """Return the cached result for analysis_id, or run the analysis and cache it."""
        cached = self.cache.get(analysis_id)
        if cached is not None:
            logger.debug("Analysis %s served from cache", analysis_id)
            return cached.result

        logger.info(
            "Analyzing %s grade %s unit '%s' (%d lessons)",
            request.grade_level, request.subject_area, request.unit_of_study, len(request.lesson_contents),
        )
        result = self.client.analyze(request)
        self.cache.put(analysis_id, CompletedAnalysis(request=request, result=result))
        return result

    def chat(
        self,
        analysis_id: Hashable,
        message: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        """
        Answer a follow-up question about a cached analysis.

        Raises:
            AnalysisError: ANALYSIS_NOT_FOUND if the analysis expired or never ran
        """
        cached = self.cache.get(analysis_id)
        if cached is None:
            raise AnalysisError(
                f"Analysis {analysis_id} not found",
                kind=ErrorKind.ANALYSIS_NOT_FOUND,
                details={"analysis_id": str(analysis_id)},
            )
        logger.debug("Follow-up on analysis %s (%d earlier messages)", analysis_id, len(history))
        return self.client.chat(message, cached.request, cached.result, history)
