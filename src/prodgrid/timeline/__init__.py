"""Timeline utilities (day splitting, visibility, column layout, grid composition)."""

from .days import DAY, DayFragment, blocks_tzinfo, day_starts, fragments_for_day, split_across_days, split_block, start_of_day
from .grid import Column, ViewParams, build_view, daily_columns, weekly_columns
from .layout import LayoutConfig, PositionedBlock, column_height, layout
from .visibility import ViewMode, select_visible, toggle_machine, view_window, visible_machines

__all__ = [
    "DAY",
    "DayFragment",
    "blocks_tzinfo",
    "start_of_day",
    "day_starts",
    "split_across_days",
    "fragments_for_day",
    "split_block",
    "LayoutConfig",
    "PositionedBlock",
    "column_height",
    "layout",
    "ViewMode",
    "select_visible",
    "view_window",
    "visible_machines",
    "toggle_machine",
    "ViewParams",
    "Column",
    "daily_columns",
    "weekly_columns",
    "build_view",
]
