"""Runtime layer - mapping engine traces onto rule schemas."""

from .trace import (
    Direction,
    TraceEntry,
    TraceObject,
    get_property_by_id,
    map_trace_to_result,
    map_traces,
)

__all__ = [
    "Direction",
    "TraceEntry",
    "TraceObject",
    "get_property_by_id",
    "map_trace_to_result",
    "map_traces",
]
