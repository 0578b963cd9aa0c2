# meeting_scheduler/services/layout_engine.py
from __future__ import annotations

from typing import Dict, List, Sequence

from meeting_scheduler.schemas.meeting import Meeting
from meeting_scheduler.schemas.week_view import Placement
from meeting_scheduler.services.time_grid import ensure_valid_range


def layout_meetings(meetings: Sequence[Meeting]) -> Dict[str, Placement]:
    """
    Assign every meeting of one day a column so that overlapping meetings
    never share a column.

    Algorithm
    ---------
    1) Sort by start time, ties broken by end time.
    2) Sweep into maximal clusters: a meeting joins the current cluster when it
       starts strictly before the latest end seen in that cluster.
    3) Inside a cluster, place each meeting in the first column whose last
       meeting ends at or before this one starts; otherwise open a new column.
    4) Every meeting of a cluster reports the cluster's final column count.

    First-fit over start-sorted intervals is an optimal interval-graph
    coloring, so `total_columns` equals the maximum number of meetings
    running at the same instant within the cluster.

    Raises
    ------
    InvalidTimeRangeError
        If any meeting does not end after it starts.
    """
    for meeting in meetings:
        ensure_valid_range(meeting.start_time, meeting.end_time)

    ordered = sorted(meetings, key=lambda m: (m.start_time, m.end_time))
    layout: Dict[str, Placement] = {}

    index = 0
    while index < len(ordered):
        cluster = [ordered[index]]
        cluster_end = ordered[index].end_time
        index += 1

        while index < len(ordered) and ordered[index].start_time < cluster_end:
            cluster.append(ordered[index])
            cluster_end = max(cluster_end, ordered[index].end_time)
            index += 1

        columns = _assign_columns(cluster)
        total_columns = max(columns.values()) + 1
        for meeting_id, column in columns.items():
            layout[meeting_id] = Placement(column=column, total_columns=total_columns)

    return layout


def _assign_columns(cluster: List[Meeting]) -> Dict[str, int]:
    # last end time placed in each column
    column_ends: list = []
    assigned: Dict[str, int] = {}

    for meeting in cluster:
        for column, last_end in enumerate(column_ends):
            if last_end <= meeting.start_time:
                column_ends[column] = meeting.end_time
                assigned[meeting.id] = column
                break
        else:
            assigned[meeting.id] = len(column_ends)
            column_ends.append(meeting.end_time)

    return assigned
