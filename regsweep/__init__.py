"""
regsweep - A mark-and-sweep garbage collector for registry image stores.

A registry store holds tags pointing at images, and images form parent
chains (ancestry). regsweep finds tags not updated within a retention
window, works out which images are still reachable from the remaining
tags, and removes the images only the stale tags reference.

Quick Start:
    import regsweep

    # Report only (nothing is removed)
    result = regsweep.run_gc("/var/lib/registry", "20d")
    print(len(result.plan.marked), "images would be removed")

    # Remove for real
    regsweep.run_gc("/var/lib/registry", "20d", pretend=False)

Pipeline:
    MetadataLoader -> classify_stale -> compute_safe_set
        -> plan_deletions -> SweepExecutor

Domain Objects:
    Tag - Registry tag with resolved ancestry
    Image - Content-addressed image reference
    SweepPlan - Stale tags, safe images, images marked for deletion
"""

__version__ = "0.1.0"

# High-level API
from .api import run_gc, GCResult

# Domain objects
from .domain import Image, Tag, TagKey, TagRecord, RecordKind, SweepPlan

# Services (for advanced use)
from .services import (
    MetadataLoader,
    SweepExecutor,
    ExecutionReport,
    build_plan,
    classify_stale,
    compute_safe_set,
    plan_deletions,
    parse_retention,
)

# Infrastructure
from .infra import RegistryStore

# Errors
from .errors import (
    SweepError,
    LoadError,
    StoreNotFoundError,
    StoreCorruptError,
    DeleteError,
    ConfigError,
    RetentionParseError,
)

# Configuration
from .config import load_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "run_gc",
    "GCResult",
    # Domain objects
    "Image",
    "Tag",
    "TagKey",
    "TagRecord",
    "RecordKind",
    "SweepPlan",
    # Services
    "MetadataLoader",
    "SweepExecutor",
    "ExecutionReport",
    "build_plan",
    "classify_stale",
    "compute_safe_set",
    "plan_deletions",
    "parse_retention",
    # Infrastructure
    "RegistryStore",
    # Errors
    "SweepError",
    "LoadError",
    "StoreNotFoundError",
    "StoreCorruptError",
    "DeleteError",
    "ConfigError",
    "RetentionParseError",
    # Configuration
    "load_config",
]
