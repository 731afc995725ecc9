"""
Output format utilities for regsweep CLI commands.

Provides functions to format report records as CSV, TSV, YAML, JSON, and JSONL.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterable, Iterator, Optional
import yaml

RECORD_FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')
ALL_FORMATS = ('text', 'table') + RECORD_FORMATS


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Dictionaries to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "csv":
        yield from format_delimited(data, fields, ',')
    elif format == "tsv":
        yield from format_delimited(data, fields, '\t')
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    yield json.dumps(list(data), ensure_ascii=False, indent=2)


def format_yaml(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_delimited(data: Iterable[Dict[str, Any]], fields: Optional[List[str]] = None,
                     delimiter: str = ',') -> Iterator[str]:
    """
    Format data as CSV or TSV.

    Args:
        data: Dictionaries to format
        fields: Optional list of fields to include. If None, uses all fields
            seen across items, sorted.
        delimiter: Column delimiter
    """
    data_list = [flatten_dict(item) for item in data]
    if not data_list:
        return

    if fields is None:
        all_fields: set[str] = set()
        for item in data_list:
            all_fields.update(item.keys())
        fields = sorted(all_fields)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter,
                            extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for item in data_list:
        writer.writerow(item)

    yield output.getvalue().rstrip('\n')


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'a': {'b': 1, 'c': 2}} -> {'a.b': 1, 'a.c': 2}
        {'images': ['x', 'y']}  -> {'images': 'x, y'}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            items.append((new_key, ', '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'text') -> str:
    """
    Get output format from environment variable.

    Checks REGSWEEP_FORMAT environment variable.
    """
    format = os.environ.get('REGSWEEP_FORMAT', default).lower()
    if format not in ALL_FORMATS:
        return default
    return format
