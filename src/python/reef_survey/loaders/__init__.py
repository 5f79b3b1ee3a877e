"""Survey sheet loaders."""

from reef_survey.loaders.benthic import load_benthic
from reef_survey.loaders.fish import load_fish
from reef_survey.loaders.inverts import load_macroinvertebrates
from reef_survey.loaders.rugosity import load_rugosity

__all__ = [
    "load_benthic",
    "load_fish",
    "load_macroinvertebrates",
    "load_rugosity",
]
