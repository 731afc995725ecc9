"""
Service layer for regsweep.

The garbage collection pipeline, in the order it runs:
- MetadataLoader: Tags and their ancestry from the store
- classify_stale: Live/stale partition against a retention window
- compute_safe_set: Images reachable from live tags (mark)
- plan_deletions: Images owned only by stale tags (sweep)
- SweepExecutor: Report or delete the planned images

build_plan composes the three pure passes into a SweepPlan.
"""

from .loader import MetadataLoader, merge_records
from .retention import parse_retention, classify_stale, cutoff_time
from .reachability import compute_safe_set
from .planner import plan_deletions, build_plan
from .executor import SweepExecutor, ExecutionReport, TagEntry

__all__ = [
    'MetadataLoader',
    'merge_records',
    'parse_retention',
    'classify_stale',
    'cutoff_time',
    'compute_safe_set',
    'plan_deletions',
    'build_plan',
    'SweepExecutor',
    'ExecutionReport',
    'TagEntry',
]
