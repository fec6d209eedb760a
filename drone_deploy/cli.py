"""Command line interface for drone_deploy."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.logging import RichHandler

from .cli_progress import DeployProgressDisplay, render_configuration_summary
from .models import DeployConfig
from .orchestrator import DeployOrchestrator, FileCollector


DEFAULT_PORT = 8080
DEFAULT_TIMEOUT = 60.0
TRUTHY = {"1", "true", "yes", "on"}


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or LOG_LEVEL is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    env_level = os.getenv("LOG_LEVEL")
    if silent or (not debug and not log_level and not env_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, (log_level or env_level or "INFO").upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in TRUTHY


def _build_config(args: argparse.Namespace) -> DeployConfig:
    """Merge arguments with DRONE_* environment variables."""
    host = args.host or os.getenv("DRONE_HOST")
    channel = args.channel or os.getenv("DRONE_CHANNEL")
    key = args.key or os.getenv("DRONE_DEPLOY_KEY")

    missing = [
        name
        for name, value in (
            ("host (--host / DRONE_HOST)", host),
            ("channel (--channel / DRONE_CHANNEL)", channel),
            ("deploy key (--key / DRONE_DEPLOY_KEY)", key),
        )
        if not value
    ]
    if missing:
        raise CLIError(f"missing configuration: {', '.join(missing)}")

    raw_port = args.port if args.port is not None else os.getenv("DRONE_PORT", DEFAULT_PORT)
    raw_timeout = (
        args.timeout if args.timeout is not None else os.getenv("DRONE_TIMEOUT", DEFAULT_TIMEOUT)
    )
    try:
        port = int(raw_port)
    except (TypeError, ValueError) as exc:
        raise CLIError(f"invalid port: {raw_port}") from exc
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError) as exc:
        raise CLIError(f"invalid timeout: {raw_timeout}") from exc
    if timeout <= 0:
        raise CLIError(f"timeout must be positive: {raw_timeout}")

    return DeployConfig(
        host=host,
        port=port,
        channel=channel,
        key=key,
        upload_poms=args.upload_poms or _env_flag("DRONE_UPLOAD_POMS"),
        skip_unparseable_files=args.skip_unparseable or _env_flag("DRONE_SKIP_UNPARSEABLE"),
        timeout=timeout,
    )


def _collect(paths: Sequence[Path]) -> List[Path]:
    missing = [str(path) for path in paths if not path.exists()]
    if missing:
        raise CLIError(f"path does not exist: {', '.join(missing)}")
    files = FileCollector.collect_files(paths)
    if not files:
        raise CLIError("no jar files found")
    return files


async def _run_deploy(config: DeployConfig, files: List[Path]) -> int:
    display = DeployProgressDisplay()
    async with DeployOrchestrator(config) as orchestrator:
        display.attach(orchestrator)
        result = await orchestrator.run(files)
    display.on_finish(result)
    if result.success:
        return 0
    print(f"ERROR: {result.error}", file=sys.stderr)
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drone-deploy",
        description="Upload build output jars to a Package Drone channel.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Jar files or folders to scan for jars",
    )
    parser.add_argument("--host", default=None, help="Repository host (default from DRONE_HOST)")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Repository port (default from DRONE_PORT or {DEFAULT_PORT})",
    )
    parser.add_argument("-c", "--channel", default=None, help="Target channel (default from DRONE_CHANNEL)")
    parser.add_argument("-k", "--key", default=None, help="Channel deploy key (default from DRONE_DEPLOY_KEY)")
    parser.add_argument(
        "--upload-poms",
        action="store_true",
        help="Attach each jar's pom.xml as a child artifact",
    )
    parser.add_argument(
        "-s",
        "--skip-unparseable",
        action="store_true",
        help="Skip jars without a pom.xml instead of failing",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Seconds per upload request (default from DRONE_TIMEOUT or {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="drone-deploy (from drone_deploy)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if not args.paths:
        parser.print_help()
        return 0

    try:
        config = _build_config(args)
        files = _collect([Path(path).expanduser() for path in args.paths])
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    render_configuration_summary(
        {
            "Repository": config.base_url,
            "Channel": config.channel,
            "Deploy Key": config.key,
            "Files": len(files),
            "Upload POMs": "yes" if config.upload_poms else "no",
            "Skip Unparseable": "yes" if config.skip_unparseable_files else "no",
            "Timeout": f"{config.timeout:g}s",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_deploy(config, files))
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
