#!/usr/bin/env python3
# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI entry point for validating textproto files."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import OUTPUT_FORMATS, ValidatorConfig
from .exceptions import ConfigurationError
from .file_io.file_access import LocalFileAccess
from .report import ValidationResult
from .utils.logging_utils import verbosity_to_level
from .utils.source_location import format_source
from .validator import validate_files

EPILOG = """\
Each FILE must start with two comments naming its schema and message type:

  # proto-file: path/to/schema.proto
  # proto-message: package.MessageName
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='textproto-validator',
        description='Validate protobuf text-format files against the schema named in their header',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'paths',
        nargs='+',
        metavar='FILE',
        help='Textproto file(s) to validate',
    )
    parser.add_argument(
        '-I', '--import-path',
        action='append',
        default=[],
        dest='import_paths',
        metavar='DIR',
        help='Specify the directory in which to search for proto imports. May be specified multiple times.',
    )
    parser.add_argument(
        '--config',
        default=None,
        metavar='FILE',
        help='YAML configuration file (import_paths, log_level, output_format)',
    )
    parser.add_argument(
        '--format',
        choices=OUTPUT_FORMATS,
        default=None,
        help='Output format (default: human)',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase log verbosity (-v info, -vv debug)',
    )
    return parser


def _escape_workflow_command(value: str) -> str:
    return value.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


def print_results(results: List[ValidationResult], output_format: str) -> None:
    if output_format == 'json':
        output = {
            'files': len(results),
            'errors': sum(len(r.errors) for r in results),
            'results': [r.to_dict() for r in results],
        }
        print(json.dumps(output, indent=2))
    elif output_format == 'github-actions':
        for result in results:
            for error in result.errors:
                properties = f"file={error.get('file', result.file_path)},line={error.get('line', 1)}"
                if 'column' in error:
                    properties += f",col={error['column']}"
                print(f"::error {properties}::{_escape_workflow_command(error['message'])}")
    else:  # human-readable
        for result in results:
            if result.ok:
                print(f"Successfully validated {result.file_path}")
                continue
            for error in result.errors:
                print(f"Failed parsing {result.file_path}: {error['message']}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the validator CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ValidatorConfig.from_env()
    try:
        if args.config:
            config = config.with_yaml(args.config)
        config = config.updated(import_paths=args.import_paths, output_format=args.format)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}{format_source(exc.location)}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        default_level = getattr(logging, config.log_level.upper(), logging.WARNING)
        config = config.updated(log_level=logging.getLevelName(verbosity_to_level(args.verbose, default_level)))
    logger = config.set_logging()
    logger.debug(f"Import paths: {list(config.import_paths)}")

    results = validate_files(args.paths, LocalFileAccess(), config.import_paths)
    print_results(results, config.output_format)

    if any(not r.ok for r in results):
        sys.exit(1)
    sys.exit(0)


if __name__ == '__main__':
    main()
