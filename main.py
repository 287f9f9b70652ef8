#!/usr/bin/env python3
"""
Main entry point for the Rust toolchain provisioner
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional
import json
import logging
from dotenv import load_dotenv
from pydantic import ValidationError

# Load environment variables from .env file
load_dotenv()

from provisioner.core.host import DryRunHost, Host, SystemHost
from provisioner.core.provisioner import Provisioner
from provisioner.core.run_recorder import RunRecorder
from provisioner.utils.logging import setup_root_logger
from config.settings import Settings


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Install the Rust toolchain and the system packages it builds against"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log package and installer commands instead of running them"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--artifacts-dir",
        type=Path,
        help="Directory for run records (default: artifacts)"
    )

    parser.add_argument(
        "--no-record",
        action="store_true",
        help="Do not write a JSON record of the run"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, then apply command line overrides."""
    config_data = {}
    if args.config:
        if args.config.exists():
            with open(args.config) as f:
                config_data = json.load(f)
        else:
            logging.getLogger(__name__).warning(f"Config file not found: {args.config}, using defaults")

    if args.dry_run:
        config_data["dry_run"] = True
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.artifacts_dir:
        config_data.setdefault("artifacts", {})["base_path"] = str(args.artifacts_dir)
    if args.no_record:
        config_data.setdefault("artifacts", {})["record_runs"] = False

    return Settings(**config_data)


def build_host(settings: Settings) -> Host:
    host = SystemHost(
        package_manager=settings.packages.manager,
        min_tls_version=settings.toolchain.min_tls_version
    )
    if settings.dry_run:
        return DryRunHost(host)
    return host


def run(argv: Optional[List[str]] = None, host: Optional[Host] = None) -> int:
    """Run the provisioner and return the process exit code."""
    args = parse_arguments(argv)
    logger = logging.getLogger(__name__)

    try:
        settings = load_config(args)
    except (ValidationError, ValueError) as e:
        setup_root_logger(level=args.log_level or "INFO")
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_root_logger(
        settings.logging.file_path,
        settings.logging.level,
        format_string=settings.logging.format,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )

    logger.info("Starting Rust toolchain provisioning")
    logger.debug(f"Arguments: {vars(args)}")

    try:
        provisioner = Provisioner(host or build_host(settings), settings)
        result = provisioner.run()

        if settings.artifacts.record_runs:
            RunRecorder(settings.artifacts.base_path).record(result)

        logger.info("=" * 60)
        logger.info("SUMMARY")
        logger.info("=" * 60)
        for step in result.steps:
            logger.info(f"{step.step}: {step.status.value}")
        logger.info(f"Duration: {result.duration_seconds:.2f} seconds")
        logger.info("=" * 60)

        if result.success:
            if result.toolchain_version:
                print(result.toolchain_version)
            print(provisioner.success_message())
        return result.exit_code

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main():
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
