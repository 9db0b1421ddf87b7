"""Collapse repeated disaster declaration rows into unique events.

Two groupings exist on purpose:

* display grouping keys on ``(title, state, type)`` so the same declaration
  title is listed once with a count;
* penalty grouping keys on ``(disaster_number, state)`` (falling back to the
  row id) so rows that describe the same real disaster under different titles
  are penalized once.

Both preserve the first-seen order of keys.
"""

from __future__ import annotations

from typing import Callable, Hashable, Iterable

from .records import DisasterEvent, DisasterGroup


def display_key(event: DisasterEvent) -> tuple[str, str, str]:
    return (event.title or "", event.state or "", event.type or "")


def penalty_key(event: DisasterEvent) -> tuple[str, ...]:
    if event.disaster_number is not None and event.state is not None:
        return ("event", str(event.disaster_number), event.state)
    return ("id", event.id)


def _group(
    events: Iterable[tuple[DisasterEvent, float | None]],
    key_fn: Callable[[DisasterEvent], Hashable],
) -> list[DisasterGroup]:
    groups: dict[Hashable, DisasterGroup] = {}
    for event, km in events:
        key = key_fn(event)
        existing = groups.get(key)
        if existing is None:
            groups[key] = DisasterGroup(event=event, count=1, distance_km=km)
            continue
        existing.count += 1
        if km is not None and (existing.distance_km is None or km < existing.distance_km):
            existing.distance_km = km
    return list(groups.values())


def _with_distances(events: Iterable[DisasterEvent | tuple[DisasterEvent, float]]):
    for item in events:
        if isinstance(item, DisasterEvent):
            yield item, None
        else:
            yield item[0], item[1]


def group_for_display(
    events: Iterable[DisasterEvent | tuple[DisasterEvent, float]],
) -> list[DisasterGroup]:
    """Group by (title, state, type). Accepts bare events or (event, km) pairs."""
    return _group(_with_distances(events), display_key)


def group_for_penalty(
    events: Iterable[DisasterEvent | tuple[DisasterEvent, float]],
) -> list[DisasterGroup]:
    """Group by (disaster_number, state) or id; ``distance_km`` is the nearest row."""
    return _group(_with_distances(events), penalty_key)


def describe_group(group: DisasterGroup, fallback: str) -> str:
    event = group.event
    if event.title:
        label = f"{event.title} ({event.state})" if event.state else event.title
    else:
        label = fallback
    if group.count > 1:
        return f"{label} ({group.count} declarations)"
    return label
