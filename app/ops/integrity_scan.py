from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from dataclasses import asdict

from sqlalchemy.orm import sessionmaker

from app.kaunter.core.config import settings
from app.kaunter.db.session import build_engine
from app.ops.integrity_checks import SEVERITY_CRITICAL, SEVERITY_WARN, IntegrityFinding, run_integrity_checks


def _summarize(findings: list[IntegrityFinding]) -> dict:
    counts = Counter(finding.severity for finding in findings)
    return {
        "total": len(findings),
        "critical": counts.get(SEVERITY_CRITICAL, 0),
        "warn": counts.get(SEVERITY_WARN, 0),
    }


def _format_text(summary: dict, findings: list[IntegrityFinding]) -> str:
    lines = [
        "Integrity Scan Report",
        f"Total findings: {summary['total']}",
        f"CRITICAL: {summary['critical']}",
        f"WARN: {summary['warn']}",
        "",
    ]
    for finding in findings:
        lines.append(
            f"[{finding.severity}] {finding.check_id} "
            f"entity={finding.entity} id={finding.entity_id or '-'} {finding.message}"
        )
        if finding.details:
            lines.append(f"  details={json.dumps(finding.details, default=str)}")
    return "\n".join(lines)


def run_scan(output_format: str, fail_on_critical: bool, *, database_url: str | None = None) -> int:
    if not settings.OPS_ENABLE_INTEGRITY_SCAN:
        print("Integrity scan disabled by OPS_ENABLE_INTEGRITY_SCAN.", file=sys.stderr)
        return 2
    engine = build_engine(database_url or settings.DATABASE_URL)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    try:
        with SessionLocal() as db:
            findings = run_integrity_checks(db)
    finally:
        engine.dispose()
    summary = _summarize(findings)
    if output_format == "json":
        print(json.dumps({"summary": summary, "findings": [asdict(f) for f in findings]}, indent=2, default=str))
    else:
        print(_format_text(summary, findings))
    if fail_on_critical and summary["critical"] > 0:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Kaunter POS integrity scan")
    parser.add_argument("--format", choices=["json", "text"], default="text")
    parser.add_argument(
        "--fail-on-critical",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="exit with status 1 when critical findings exist",
    )
    parser.add_argument("--database-url", default=None, help="defaults to DATABASE_URL")
    args = parser.parse_args(argv)
    return run_scan(args.format, args.fail_on_critical, database_url=args.database_url)


if __name__ == "__main__":
    raise SystemExit(main())
