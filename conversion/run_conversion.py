#!/usr/bin/env python3
"""
EDF → CFS Batch Converter

Converts EDF recordings to CFS files for sleep scoring:
- Four channels are used: C3-A2, C4-A1, EOGl-A2, EOGr-A1
- Files are converted in parallel, one .cfs next to each .edf
- A failing file is reported and the batch continues

Usage:
  edf2cfs -a C3A2 -b C4A1 -x ELA2 -z ERA1 rec1.edf rec2.edf
  edf2cfs -a C3A2 -b C4A1 -x ELA2 -z ERA1 -d edf_dir -o -l
  edf2cfs -d edf_dir                    # prompts for channels
"""

import argparse
import sys
from datetime import datetime
from typing import List, Optional

from .batch import run_batch
from .channels import open_recording, prompt_channel_labels
from .config import (
    default_config,
    get_default_config_path,
    load_config,
    merge_config_with_args,
    role_map_from_config,
    validate_conversion_config,
)
from .errors import FileOpenError
from .html_log import HtmlLog
from .naming import build_log_path, find_edf_files


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        prog="edf2cfs",
        description="Convert EDF files to CFS (Compressed Feature Set) files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s -a C3A2 -b C4A1 -x ELA2 -z ERA1 rec1.edf rec2.edf
  %(prog)s -a C3A2 -b C4A1 -x ELA2 -z ERA1 -d edf_dir -q -o -l
  %(prog)s -d edf_dir                     # select channels interactively

Configuration:
  - Loads --config, or config.json next to this module if present
  - CLI flags override config values
  - If any channel label is missing, a selection menu is shown
        '''
    )

    parser.add_argument("files", nargs="*", help="EDF files to convert")
    parser.add_argument("-a", "--c3", type=str, default=None, help="C3-A2 channel label")
    parser.add_argument("-b", "--c4", type=str, default=None, help="C4-A1 channel label")
    parser.add_argument("-x", "--el", type=str, default=None, help="EL-A2 channel label")
    parser.add_argument("-z", "--er", type=str, default=None, help="ER-A1 channel label")
    parser.add_argument("-d", "--dir", type=str, default=None,
                        help="Directory searched recursively for .edf files")
    parser.add_argument("-q", "--quiet", action="store_true", help="Silent mode")
    parser.add_argument("-o", "--overwrite", action="store_true", help="Overwrite existing .cfs files")
    parser.add_argument("-l", "--log", dest="save_log", action="store_true", help="Save HTML log")
    parser.add_argument("-w", "--workers", type=int, default=None,
                        help="Files converted simultaneously (default: CPU count)")
    parser.add_argument("-c", "--config", type=str, default=None, help="Path to JSON config file")

    return parser.parse_args(argv)


def _load_configuration(args: argparse.Namespace) -> dict:
    if args.config:
        config = load_config(args.config)
    elif get_default_config_path().exists():
        config = load_config(get_default_config_path())
    else:
        config = default_config()
    config = merge_config_with_args(config, args)
    validate_conversion_config(config)
    return config


def _collect_files(args: argparse.Namespace) -> list:
    files = list(args.files)
    if args.dir:
        files.extend(str(p) for p in find_edf_files(args.dir))
    return files


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = parse_arguments(argv)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    try:
        config = _load_configuration(args)
    except ValueError as e:
        print(f"\n✗ CONFIG ERROR: {e}")
        return 1

    files = _collect_files(args)
    if not files:
        print("No EDF files found.")
        print("edf2cfs -h for usage details.")
        return 1

    conv = config["conversion"]
    quiet = conv["quiet"]

    role_map = role_map_from_config(config)
    if role_map is None:
        try:
            with open_recording(files[0]) as recording:
                role_map = prompt_channel_labels(recording)
        except (FileOpenError, ValueError) as e:
            print(f"\n✗ {e}")
            return 1

    log = None
    if conv["save_log"]:
        log_path = build_log_path(files[0])
        try:
            log = HtmlLog(log_path, role_map, started=datetime.now()).open()
            print(f"Log will be saved at:\n{log_path}")
        except OSError as e:
            print(f"    ⚠ Could not open log file {log_path}: {e}")
            log = None

    def report(result):
        if not result.success:
            hint = "please check log." if log else "please enable logging to see details."
            print(f"ERROR: Filename: {result.source_path}, {hint}")
        elif not quiet:
            print(f"Filename: {result.source_path}, processed successfully")
        if log:
            log.add(result)

    try:
        batch = run_batch(
            files,
            role_map,
            overwrite=conv["overwrite"],
            workers=conv["workers"],
            on_result=report,
        )

        n_files = len(batch.results)
        print(f"{n_files} Files processed in {int(batch.elapsed_s)} seconds.")
        print(f"{batch.success_count} Files converted successfully. "
              f"{batch.failure_count} Files could not be converted.")

        if log:
            log.finish(n_files, batch.success_count, batch.elapsed_s)
    finally:
        if log:
            log.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
