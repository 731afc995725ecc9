"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .errors import SweepError, DeleteError
from .format_utils import format_output, get_format_from_env, RECORD_FORMATS


def _error_object(e: Exception, exit_code: int) -> dict:
    error_obj = {
        "error": str(e),
        "type": type(e).__name__,
        "exit_code": exit_code
    }
    path = getattr(e, 'path', None)
    if path:
        error_obj['path'] = path
    if isinstance(e, DeleteError):
        error_obj['image'] = e.image_id
        error_obj['deleted'] = e.deleted
    return error_obj


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Data output on stdout in the requested format
    - --quiet/-q suppresses data output
    - Consistent error handling and exit codes

    The wrapped command either prints its own output and returns None,
    or returns a list/generator of dicts to be formatted.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format', None)

        if output_format is None:
            output_format = get_format_from_env('text')
            kwargs['format'] = output_format

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress

        try:
            result = func(*args, **kwargs)

            if quiet or result is None:
                pass
            elif output_format in RECORD_FORMATS:
                if isinstance(result, dict):
                    result = [result]
                for line in format_output(result, output_format):
                    print(line, flush=True)
            elif isinstance(result, (list, tuple, Generator)):
                for item in result:
                    print(json.dumps(item, ensure_ascii=False), flush=True)
            else:
                print(result, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except AssertionError:
            # Broken invariant: a bug, not a runtime condition
            raise
        except (CommandError, SweepError) as e:
            exit_code = get_exit_code_for_exception(e)
            progress.error(str(e))
            if not quiet:
                print(json.dumps(_error_object(e, exit_code), ensure_ascii=False), flush=True)
            sys.exit(exit_code)
        except Exception as e:
            exit_code = get_exit_code_for_exception(e)
            progress.error(f"Command failed: {e}")
            if not quiet:
                print(json.dumps(_error_object(e, exit_code), ensure_ascii=False), flush=True)
            sys.exit(exit_code)

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Force progress output even when piped'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output, show only progress'),
    'format': click.option('-f', '--format',
                         type=click.Choice(['text', 'table', 'json', 'jsonl', 'csv', 'tsv', 'yaml']),
                         help='Output format (default: text, or from REGSWEEP_FORMAT env)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
