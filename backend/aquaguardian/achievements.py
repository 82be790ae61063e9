BADGE_THRESHOLDS: list[tuple[int, str]] = [
    (1, "First Test"),
    (5, "Regular Tester"),
    (10, "Water Guardian"),
    (25, "Aqua Expert"),
    (50, "Water Master"),
    (100, "Hydro Legend"),
]


def badges(test_count: int) -> list[str]:
    return [name for threshold, name in BADGE_THRESHOLDS if test_count >= threshold]


def newly_unlocked(count_before: int, count_after: int) -> list[str]:
    """badges(after) - badges(before), kept in threshold order."""
    if count_after <= count_before:
        return []
    earned = set(badges(count_before))
    return [b for b in badges(count_after) if b not in earned]


def next_locked(test_count: int, limit: int = 3) -> list[str]:
    locked = [name for threshold, name in BADGE_THRESHOLDS if test_count < threshold]
    return locked[:limit]
