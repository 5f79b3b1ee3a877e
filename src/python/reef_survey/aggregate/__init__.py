"""Grid expansion, unit conversions, roll-up and self-checks."""

from reef_survey.aggregate.compare import compare_sites
from reef_survey.aggregate.cover import mark_available, percent_cover
from reef_survey.aggregate.density import areal_rate, belt_density, fish_biomass
from reef_survey.aggregate.enrich import join_metadata, load_metadata
from reef_survey.aggregate.grid import expand_grid
from reef_survey.aggregate.levels import level_keys, roll_up, summarize
from reef_survey.aggregate.validate import check_cover_totals, check_parent_totals

__all__ = [
    "areal_rate",
    "belt_density",
    "check_cover_totals",
    "check_parent_totals",
    "compare_sites",
    "expand_grid",
    "fish_biomass",
    "join_metadata",
    "level_keys",
    "load_metadata",
    "mark_available",
    "percent_cover",
    "roll_up",
    "summarize",
]
