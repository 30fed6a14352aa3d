from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import polars as pl

# 12 base colours, then a single overflow grey shared by every further category
BASE_PALETTE = [
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#bcbd22",
    "#17becf",
    "#aec7e8",
    "#ffbb78",
    "#98df8a",
]
OVERFLOW_COLOR = "#7f7f7f"
PALETTE = BASE_PALETTE + [OVERFLOW_COLOR]


def palette_color(index: int) -> str:
    if index < len(BASE_PALETTE):
        return BASE_PALETTE[index]
    return OVERFLOW_COLOR


class PlotKind(str, Enum):
    BAR = "bar"
    HISTOGRAM = "histogram"
    HEATMAP = "heatmap"
    BOXPLOT = "boxplot"
    STACKED_PROPORTION = "stacked_proportion"
    DENSITY_BY_GROUP = "density_by_group"


class StatKind(str, Enum):
    FREQUENCY = "frequency"
    NUMERIC = "numeric"


@dataclass
class PlotSpec:
    """Plot selection plus the exact data the plot is drawn from.

    ``data`` is the primary layer (bars, bins, cells, boxes, curves);
    ``overlay`` holds an optional second layer such as a density curve.
    """

    kind: PlotKind
    column: str
    data: pl.DataFrame
    overlay: Optional[pl.DataFrame] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StatSpec:
    column: str
    kind: StatKind
    table: pl.DataFrame

    def to_records(self) -> list[dict]:
        return self.table.to_dicts()
