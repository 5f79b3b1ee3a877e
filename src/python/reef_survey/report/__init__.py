"""Tables, figures and the HTML report."""

from reef_survey.report.build import build_report
from reef_survey.report.html import Section, render_report

__all__ = ["Section", "build_report", "render_report"]
