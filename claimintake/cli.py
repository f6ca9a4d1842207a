from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .config import load_settings
from .preflight import run_preflight


def _json_print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=True))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="claimintake", description="Claim intake server")
    sub = parser.add_subparsers(dest="command", required=True)

    web = sub.add_parser("serve-web", help="Run the claim intake web server")
    web.add_argument("--host", default=None, help="Defaults to HOST")
    web.add_argument("--port", type=int, default=None, help="Defaults to PORT")
    web.add_argument("--reload", action="store_true")

    doctor = sub.add_parser("doctor", help="Check configuration and upstream reachability")
    doctor.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    doctor.add_argument("--skip-dns", action="store_true", help="Do not resolve upstream hosts")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    project_root = Path(__file__).resolve().parents[1]
    load_dotenv(project_root / ".env", override=False)
    settings = load_settings()

    if args.command == "serve-web":
        import uvicorn

        uvicorn.run(
            "claimintake.web_app:create_web_app",
            host=args.host or settings.host,
            port=args.port or settings.port,
            reload=bool(args.reload),
            factory=True,
        )
        return 0

    if args.command == "doctor":
        report = run_preflight(settings=settings, check_dns=not args.skip_dns)
        if args.strict and report.get("summary", {}).get("warnings", 0) > 0 and report["status"] != "fail":
            report["status"] = "fail"
            report["strict_override"] = "warnings_promoted_to_failures"
        _json_print(report)
        return 1 if report["status"] == "fail" else 0

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
