"""Report export for cv-match."""
from cv_match.export.markdown_report import REPORT_FILENAME, to_markdown

__all__ = ["to_markdown", "REPORT_FILENAME"]
