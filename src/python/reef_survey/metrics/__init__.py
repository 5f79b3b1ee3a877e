"""Per-dataset metric pipelines."""

from reef_survey.metrics.benthic import benthic_metrics
from reef_survey.metrics.fish import fish_metrics
from reef_survey.metrics.inverts import invert_metrics
from reef_survey.metrics.rugosity import rugosity_metrics

__all__ = ["benthic_metrics", "fish_metrics", "invert_metrics", "rugosity_metrics"]
