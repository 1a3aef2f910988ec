#!/usr/bin/env python3
"""
Ephemeral Shortener CLI
Run the link shortener / file host with its periodic purge job.

Usage:
    python main.py
    python main.py --port 8080 --ttl 600
    python main.py --public-url https://s.example.com --purge-minutes 1
"""

import argparse
import dataclasses
import sys
from typing import Optional

from shortener.config import Settings, load_settings
from shortener.printer import OutputPrinter


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="shortener",
        description="Serve short links and ephemeral file uploads.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --host 0.0.0.0 --port 8080
  python main.py --ttl 600 --purge-minutes 1 --upload-dir ./uploads

Every flag overrides the matching SHORTENER_* environment variable.
        """,
    )

    srv_group = parser.add_argument_group("Server")
    srv_group.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1).")
    srv_group.add_argument("--port", "-p", type=int, default=3000, help="Port to listen on (default: 3000).")
    srv_group.add_argument(
        "--public-url",
        default=None,
        metavar="URL",
        help="Base URL used in share addresses (default: the request host).",
    )
    srv_group.add_argument("--debug", action="store_true", help="Run Flask in debug mode.")

    store_group = parser.add_argument_group("Store")
    store_group.add_argument(
        "--ttl",
        type=int,
        default=None,
        metavar="SECONDS",
        help="Default time-to-live for new tokens (default: 3600).",
    )
    store_group.add_argument(
        "--purge-minutes",
        type=int,
        default=None,
        metavar="MINUTES",
        help="How often expired tokens are purged (default: 5).",
    )
    store_group.add_argument(
        "--upload-dir",
        default=None,
        metavar="DIR",
        help="Directory holding uploaded files (default: <tmp>/shortener_uploads).",
    )

    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument("--quiet", "-q", action="store_true", help="Suppress the startup summary.")
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Fold explicit CLI flags over the environment-derived settings."""
    overrides: dict = {}
    if args.public_url is not None:
        overrides["public_base_url"] = args.public_url.strip().rstrip("/")
    if args.ttl is not None:
        if args.ttl <= 0:
            raise ValueError(f"--ttl must be greater than 0. Got: {args.ttl}.")
        overrides["default_ttl_seconds"] = args.ttl
    if args.purge_minutes is not None:
        if args.purge_minutes < 1:
            raise ValueError(f"--purge-minutes must be at least 1. Got: {args.purge_minutes}.")
        overrides["purge_interval_minutes"] = args.purge_minutes
    if args.upload_dir is not None:
        overrides["upload_dir"] = args.upload_dir
    return dataclasses.replace(settings, **overrides)


def main(argv: Optional[list[str]] = None) -> None:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)
    printer: OutputPrinter = OutputPrinter(quiet=args.quiet, no_color=args.no_color)

    try:
        settings: Settings = apply_overrides(load_settings(), args)

        from infrastructure.web import store_registry
        store_registry.configure(settings)
    except (ValueError, OSError) as exc:
        printer.error(str(exc), hint="Check the flags and SHORTENER_* environment variables.")
        sys.exit(1)

    from infrastructure.web.expiry_scheduler import start_expiry_scheduler
    from server import app

    scheduler = start_expiry_scheduler(
        store_registry.get_link_store(),
        store_registry.get_resource_store(),
        minutes=settings.purge_interval_minutes,
    )

    printer.success(
        title=f"Listening on http://{args.host}:{args.port}",
        details={
            "Public URL":  settings.public_base_url or "(request host)",
            "Default TTL": f"{settings.default_ttl_seconds}s",
            "Purge every": f"{settings.purge_interval_minutes} min",
            "Uploads":     settings.upload_dir,
        },
    )

    try:
        app.run(host=args.host, port=args.port, debug=args.debug, use_reloader=False)
    except KeyboardInterrupt:
        printer.warning("Server stopped.", hint="All tokens were held in memory and are gone.")
        sys.exit(130)
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)


if __name__ == "__main__":
    main()
