"""Progress figures for the body weight log."""

from __future__ import annotations

# Total changes smaller than this are reported as stable
STABLE_THRESHOLD = 0.5


def summarize_weight(entries: list[dict], target_weight: float | None = None) -> dict:
    """Summarise ``entries`` as returned by ``WorkoutStore.get_weight_history``.

    ``entries`` must be in chronological order.  Goal fields are ``None``
    when no ``target_weight`` is given.
    """

    weights = [float(e["weight"]) for e in entries]
    summary = {
        "entry_count": len(weights),
        "start_weight": None,
        "current_weight": None,
        "average_weight": None,
        "total_change": 0.0,
        "remaining_to_goal": None,
        "goal_progress": None if target_weight is None else 0.0,
        "trend": "stable",
    }
    if not weights:
        return summary

    start, current = weights[0], weights[-1]
    change = current - start if len(weights) > 1 else 0.0
    summary.update(
        start_weight=start,
        current_weight=current,
        average_weight=sum(weights) / len(weights),
        total_change=change,
    )
    if abs(change) >= STABLE_THRESHOLD:
        summary["trend"] = "down" if change < 0 else "up"

    if target_weight is not None:
        summary["remaining_to_goal"] = target_weight - current
        if start == target_weight:
            summary["goal_progress"] = 1.0
        else:
            achieved = abs(current - start)
            summary["goal_progress"] = min(achieved / abs(target_weight - start), 1.0)
    return summary
