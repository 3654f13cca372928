"""
Prompt templates for curriculum analysis.
"""

import hashlib
from typing import Dict, List, Sequence, Tuple

from .models import ChatMessage, CurriculumAnalysisRequest, CurriculumAnalysisResult

LESSON_SEPARATOR = "\n\n--- NEXT LESSON ---\n\n"

SYSTEM_PROMPT = "You are an expert educational analyst specializing in curriculum alignment and assessment."

USER_PROMPT_TEMPLATE = """As an educational expert, analyze these curriculum materials for {grade_level} grade {subject_area}
on the topic of {unit_of_study}. Identify gaps and misalignments with {standards_body}.

LESSON CONTENT:
{lesson_content}

ASSESSMENT:
{assessment_content}

STUDENT RESPONSES:
{student_responses}

Based on these materials:
1. Identify standards that are insufficiently covered
2. Find weaknesses in student performance related to specific standards
3. Provide specific recommendations to improve alignment and instruction

Provide your analysis in JSON format with these sections:
- standardsGaps: Array of gaps with standardCode, standardDescription, coverage (0-100), alignment (Strong/Moderate/Weak), gapDetails, and affectedQuestions
- studentPerformanceIssues: Array of issues with issue name, relatedStandards, affectedQuestions, and description
- recommendations: Array of suggestions with recommendation, targetStandards, priority (High/Medium/Low), and description
- overallSummary: A brief summary of the analysis
"""


def get_analysis_prompt(
    request: CurriculumAnalysisRequest,
    standards_body: str = "California K12 content standards",
) -> Tuple[str, str]:
    """Return (system_prompt, user_prompt) for a request."""
    user_prompt = USER_PROMPT_TEMPLATE.format(
        grade_level=request.grade_level,
        subject_area=request.subject_area,
        unit_of_study=request.unit_of_study or "the given topic",
        standards_body=standards_body,
        lesson_content=LESSON_SEPARATOR.join(request.lesson_contents),
        assessment_content=request.assessment_content or "No assessment provided",
        student_responses=request.student_responses or "No student responses provided",
    )
    return SYSTEM_PROMPT, user_prompt


CHAT_SYSTEM_TEMPLATE = """You are an AI curriculum assistant helping teachers improve their {grade_level} grade {subject_area}
curriculum for the unit on {unit_of_study}. Use this analysis result for context: {analysis_context}"""


def get_chat_messages(
    message: str,
    request: CurriculumAnalysisRequest,
    result: CurriculumAnalysisResult,
    history: Sequence[ChatMessage] = (),
) -> List[Dict[str, str]]:
    """Chat messages for a follow-up question: context, earlier turns, then the question."""
    system_prompt = CHAT_SYSTEM_TEMPLATE.format(
        grade_level=request.grade_level,
        subject_area=request.subject_area,
        unit_of_study=request.unit_of_study or "the given topic",
        analysis_context=result.model_dump_json(by_alias=True),
    )
    messages = [{"role": "system", "content": system_prompt}]
    for turn in history:
        messages.append({"role": "user" if turn.is_user else "assistant", "content": turn.content})
    messages.append({"role": "user", "content": message})
    return messages


def compute_prompt_hash(*parts: str) -> str:
    """Short stable hash of prompt template text."""
    digest = hashlib.sha256("\n".join(parts).encode("utf-8")).hexdigest()
    return digest[:16]


def get_prompt_version() -> str:
    """Version identifier for the current prompt templates."""
    return compute_prompt_hash(SYSTEM_PROMPT, USER_PROMPT_TEMPLATE)
