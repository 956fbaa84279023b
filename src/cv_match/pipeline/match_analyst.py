"""Match Analyst: scores a CV against a job description via the LLM."""

from __future__ import annotations

import logging

import anthropic
from pydantic import ValidationError

from cv_match.clients.llm_client import DEFAULT_MODEL, LLMClient
from cv_match.errors import AnalysisFailure, ValidationFailure
from cv_match.models.analysis import ANALYSIS_SCHEMA, AnalysisResult

logger = logging.getLogger(__name__)

TOOL_NAME = "submit_match_analysis"

SYSTEM_PROMPT = """\
You are an expert ATS (Applicant Tracking System) consultant and Senior Technical Recruiter.
You always answer by calling the submit_match_analysis tool exactly once."""

PROMPT_TEMPLATE = """\
Analyze the following Candidate CV against the Job Description.

Perform a deep semantic analysis (e.g., understand that "Led a team" implies "Management").
Be strict but fair. Focus on actionable insights.

Task:
1. Extract 8-12 core requirements (Technical, Soft Skills, Experience, Education, Domain).
2. Rate each requirement match from 1-5.
3. Identify missing keywords that an ATS would scan for: present in the Job Description, absent from the CV.
4. Provide 3-5 specific, prioritized actions to improve the CV.
5. Give an overall match score from 0 to 100 and a short summary.

Candidate CV:
{cv_text}

Job Description:
{jd_text}
"""


class MatchAnalyst:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.4,
        max_tokens: int = 8192,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @staticmethod
    def build_prompt(cv_text: str, jd_text: str) -> str:
        return PROMPT_TEMPLATE.format(cv_text=cv_text, jd_text=jd_text)

    async def analyze(self, cv_text: str, jd_text: str) -> AnalysisResult:
        """Analyze a CV against a job description and return the validated report.

        Raises:
            ValidationFailure: either text is empty or whitespace-only.
            AnalysisFailure: the call failed or the payload does not fit the schema.
        """
        if not cv_text or not cv_text.strip():
            raise ValidationFailure("CV text is empty")
        if not jd_text or not jd_text.strip():
            raise ValidationFailure("Job description text is empty")

        try:
            data = await self.llm.generate_structured(
                prompt=self.build_prompt(cv_text, jd_text),
                schema=ANALYSIS_SCHEMA,
                tool_name=TOOL_NAME,
                tool_description="Submit the structured CV match analysis.",
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except anthropic.APIError as e:
            raise AnalysisFailure("Analysis request failed", cause=e) from e
        except ValueError as e:
            raise AnalysisFailure("Analysis response was not valid JSON", cause=e) from e

        if not isinstance(data, dict):
            raise AnalysisFailure(f"Expected dict from LLM, got {type(data).__name__}")
        try:
            # Only the camelCase schema keys count; snake_case field names are missing fields here.
            result = AnalysisResult.model_validate(data, by_alias=True, by_name=False)
        except ValidationError as e:
            logger.warning("Analysis payload failed validation: %s", e)
            raise AnalysisFailure("Analysis response did not match the schema", cause=e) from e

        logger.info(
            "Analysis complete: score=%d, %d requirements",
            result.overall_score,
            len(result.requirements),
        )
        return result

    def token_summary(self) -> dict:
        """Token usage since the last call to this method."""
        return self.llm.get_token_summary()
