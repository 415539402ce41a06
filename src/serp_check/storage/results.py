"""Machine-readable results files, one per run."""
from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from serp_check.tasks.search_check import QueryOutcome

logger = logging.getLogger(__name__)


def summarise(outcomes: Sequence["QueryOutcome"]) -> dict[str, object]:
    passed = sum(1 for outcome in outcomes if outcome.passed)
    failed_checks = Counter(
        outcome.failed_check for outcome in outcomes if not outcome.passed and outcome.failed_check
    )
    return {
        "total": len(outcomes),
        "passed": passed,
        "failed": len(outcomes) - passed,
        "retried": sum(1 for outcome in outcomes if outcome.attempts > 1),
        "failed_checks": dict(sorted(failed_checks.items())),
    }


class ResultsStore:
    """Writes ``results_<timestamp>.json`` files under ``root``.

    Each file holds the run summary followed by every query outcome in the
    order the queries were configured. An existing file is never overwritten;
    runs finishing within the same second get a numeric suffix.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _target(self, generated_at: datetime) -> Path:
        stem = f"results_{generated_at:%Y%m%d-%H%M%S}"
        path = self.root / f"{stem}.json"
        suffix = 1
        while path.exists():
            path = self.root / f"{stem}_{suffix}.json"
            suffix += 1
        return path

    async def write(
        self,
        outcomes: Sequence["QueryOutcome"],
        *,
        base_url: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        generated_at = generated_at or datetime.now(timezone.utc)
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._target(generated_at)
        payload: dict[str, object] = {
            "generated_at": generated_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
            "base_url": base_url,
            "summary": summarise(outcomes),
            "outcomes": [outcome.to_dict() for outcome in outcomes],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Wrote %s outcomes to %s", len(outcomes), path)
        return path
