"""
Handles the 'sweep' command: garbage collect a registry store.

This command follows our design principles:
- Pretend mode by default; --delete removes images
- Default output is the two-column +/- report on stdout
- --verbose/-v for progress output on stderr
- Thin CLI layer over regsweep.api.run_gc
"""

import click

from ..api import run_gc
from ..config import load_config, configure_logging
from ..cli_utils import standard_command, add_common_options
from ..exit_codes import MissingStoreRootError
from ..render import render_text_report, render_report_table


@click.command(name='sweep')
@click.argument('store_root', required=False)
@click.option('--older-than', 'older_than', default=None,
              help='Retention window, e.g. 20d, 12h, 2w (default: retention.older_than)')
@click.option('--pretend/--delete', 'pretend', default=None,
              help='Only report what would be removed, or really remove it (default: sweep.pretend)')
@add_common_options('format', 'verbose', 'quiet')
@standard_command
def sweep_handler(store_root, older_than, pretend, format, progress, quiet, **kwargs):
    """Remove images only reachable from stale tags.

    STORE_ROOT: Registry store directory (default: store.root from config)

    \b
    Tags not updated within the retention window are stale. Images
    reachable from any other tag are never removed.

    Output format:
    - text (default): one line per tag, '+' kept, '-' stale
    - table: the same as a formatted table
    - json/jsonl/csv/tsv/yaml: one record per tag

    Examples:

    \b
        regsweep sweep /var/lib/registry                  # Pretend, 20 day window
        regsweep sweep /var/lib/registry --older-than 7d  # Pretend, 7 day window
        regsweep sweep /var/lib/registry --delete         # Really remove images
        regsweep sweep -f jsonl                           # Store root from config
    """
    config = load_config()
    configure_logging(config)

    store_root = store_root or config.get('store', {}).get('root')
    if not store_root:
        raise MissingStoreRootError()

    if older_than is None:
        older_than = config.get('retention', {}).get('older_than', '20d')
    if pretend is None:
        pretend = bool(config.get('sweep', {}).get('pretend', True))

    progress(f"Sweeping {store_root} (older than {older_than}, {'pretend' if pretend else 'delete'})...")
    result = run_gc(store_root, older_than, pretend=pretend, config=config, progress=progress)
    report = result.report

    if not pretend:
        progress.success(f"Deleted {len(report.deleted_images)} images "
                         f"from {len(report.removed)} stale tags")

    report_config = config.get('report', {})
    if format == 'text':
        if pretend and not quiet:
            lines = render_text_report(
                report,
                name_width=int(report_config.get('name_width', 32)),
                time_format=report_config.get('time_format', '%Y-%m-%d %H:%M:%S UTC'),
            )
            for line in lines:
                click.echo(line)
        return None

    if format == 'table':
        if not quiet:
            render_report_table(
                report,
                time_format=report_config.get('time_format', '%Y-%m-%d %H:%M:%S UTC'),
            )
        return None

    return report.records()
