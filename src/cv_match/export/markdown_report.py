"""Markdown export of an analysis result."""

from __future__ import annotations

from cv_match.models.analysis import AnalysisResult

REPORT_FILENAME = "CV_Analysis_Report.md"


def _cell(text: str) -> str:
    """Make text safe for a single pipe-table cell."""
    return " ".join(text.split()).replace("|", "\\|")


def to_markdown(result: AnalysisResult) -> str:
    """Render the report. Pure function: equal input gives identical output."""
    lines = [
        "# CV Match Analysis Report",
        "",
        f"**Overall Score:** {result.overall_score}/100",
        f"**Summary:** {result.summary}",
        "",
        "## Key Strengths",
        *(f"- {s}" for s in result.strengths),
        "",
        "## Requirements Matrix",
        "| Requirement | Evidence | Rating | Gap | Action |",
        "|---|---|---|---|---|",
        *(
            f"| {_cell(r.requirement)} | {_cell(r.evidence)} | {r.rating}/5 "
            f"| {_cell(r.gap_notes)} | {_cell(r.action_to_improve)} |"
            for r in result.requirements
        ),
        "",
        "## Missing Keywords",
        ", ".join(result.missing_keywords),
        "",
        "## Prioritized Next Steps",
        *(f"{i}. {step}" for i, step in enumerate(result.next_steps, start=1)),
    ]
    return "\n".join(lines).strip() + "\n"
