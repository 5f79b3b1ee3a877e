"""
Rugosity metrics.

Maximum vertical relief per meter, averaged meter → transect → site.
Repeated readings within a meter are averaged first.
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from reef_survey.aggregate.levels import roll_up

HIERARCHY = ["site", "transect", "meter"]
RELIEF = "Relief"


def rugosity_metrics(rugosity: pd.DataFrame, agg: dict[str, Any]) -> dict[str, dict[str, pd.DataFrame]]:
    per_meter = rugosity.groupby(HIERARCHY, sort=True)["relief_cm"].mean().reset_index()
    per_meter["measure"] = RELIEF
    levels = roll_up(per_meter, HIERARCHY, "measure", "relief_cm", agg["se_ddof"])
    return {"relief": levels}
