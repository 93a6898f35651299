# src/clarity_todo/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..sync.controller import SyncController
from ..views.projector import GroupBy, SortBy, StatusFilter


@dataclass
class ViewState:
    """What the console currently shows (the browser keeps the same knobs in UI state)."""

    status: StatusFilter = StatusFilter.ALL
    search: str = ""
    sort_by: SortBy = SortBy.MANUAL
    group_by: GroupBy = GroupBy.NONE

    # Task ids in the order they were last printed; commands take 1-based positions.
    shown_ids: list[str] = field(default_factory=list)


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    controller: SyncController
    view: ViewState = field(default_factory=ViewState)
