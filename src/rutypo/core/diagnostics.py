from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _safe_preview(text: str, limit: int = 320) -> str:
    value = (text or "").strip()
    if len(value) <= limit:
        return value
    return value[:limit].rstrip() + "…"


@dataclass
class RuleTrace:
    """
    Outcome of a single rule within one ``process`` call.
    """

    name: str
    description: str
    kind: str
    changed: bool
    length_before: int
    length_after: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "changed": self.changed,
            "length_before": self.length_before,
            "length_after": self.length_after,
        }


@dataclass
class ProcessDiagnostics:
    """
    Result text together with per-rule traces.
    """

    text: str
    timestamp_utc: str
    duration_ms: Optional[float]
    source: Optional[str] = None
    rules: List[RuleTrace] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def changed_rules(self) -> List[str]:
        return [r.name for r in self.rules if r.changed]

    @property
    def changed(self) -> bool:
        return any(r.changed for r in self.rules)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "timestamp_utc": self.timestamp_utc,
            "duration_ms": self.duration_ms,
            "changed_rules": self.changed_rules,
            "rules": [r.to_dict() for r in self.rules],
            "text_preview": _safe_preview(self.text),
            "extra": self.extra,
        }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def write_report(diagnostics: ProcessDiagnostics, directory: str | Path) -> Path:
    """
    Append diagnostics as JSONL into <directory>/YYYY-MM-DD.jsonl.
    """

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc)
    log_path = out_dir / f"{ts:%Y-%m-%d}.jsonl"
    payload = diagnostics.to_dict()

    with log_path.open("a", encoding="utf-8") as fp:
        fp.write(json.dumps(payload, ensure_ascii=False) + "\n")

    return log_path
