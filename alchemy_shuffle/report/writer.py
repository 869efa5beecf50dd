"""Log and summary files for a randomization run.

- effect log: per ingredient, original vs new effects in slot order
- summary report: per assigned effect, the ingredients that received it
- result_to_dict: JSON-ready payload of both
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.models import EffectSummary, RandomizationResult

logger = logging.getLogger(__name__)

EFFECT_LOG_NAME = "RandomAlchemyLog.txt"
SUMMARY_REPORT_NAME = "RandomAlchemySummary.txt"


def format_effect(effect: EffectSummary) -> str:
    """One effect as 'Name (mag X, area Y, dur Z)'."""
    return (
        f"{effect.name or effect.effect_id} "
        f"(mag {effect.magnitude.normalize():f}, area {effect.area}, dur {effect.duration})"
    )


def _header(result: RandomizationResult, title: str) -> list[str]:
    lines = [
        title,
        f"Generated: {result.meta.get('generated_at', datetime.now().isoformat())}",
        f"Mode: {result.mode}"
        + (" (ignoring distribution)" if result.ignore_dist else ""),
        f"Seed: {result.seed}",
        f"Ingredients: {len(result.assignments)}",
        "",
    ]
    return lines


def format_effect_log(result: RandomizationResult) -> str:
    """Render original vs new effects for every ingredient."""
    lines = _header(result, "Alchemy Effects Randomizer - effect log")
    for assignment in sorted(result.assignments, key=lambda a: a.record_name.lower()):
        lines.append(f"{assignment.record_name} [{assignment.form_id}]")
        lines.append("  Original:")
        for i, effect in enumerate(assignment.original, 1):
            lines.append(f"    {i}. {format_effect(effect)}")
        lines.append("  New:")
        for i, effect in enumerate(assignment.assigned, 1):
            lines.append(f"    {i}. {format_effect(effect)}")
        lines.append("")
    return "\n".join(lines)


def format_summary_report(result: RandomizationResult) -> str:
    """Render every assigned effect with the ingredients that now carry it."""
    lines = _header(result, "Alchemy Effects Randomizer - summary")
    names = result.effect_names()
    index = result.effect_index()
    for effect_id in sorted(index, key=lambda e: (names[e].lower(), e)):
        recipients = index[effect_id]
        lines.append(f"{names[effect_id]} [{effect_id}] ({len(recipients)})")
        for record_name in recipients:
            lines.append(f"  - {record_name}")
        lines.append("")
    return "\n".join(lines)


def write_effect_log(result: RandomizationResult, path: Path | str) -> Path:
    """Write the effect log to path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_effect_log(result), encoding="utf-8")
    logger.info("Wrote effect log to %s", path)
    return path


def write_summary_report(result: RandomizationResult, path: Path | str) -> Path:
    """Write the summary report to path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_summary_report(result), encoding="utf-8")
    logger.info("Wrote summary report to %s", path)
    return path


def write_reports(result: RandomizationResult, log_dir: Path | str) -> list[Path]:
    """Write the effect log and summary report into log_dir."""
    log_dir = Path(log_dir)
    return [
        write_effect_log(result, log_dir / EFFECT_LOG_NAME),
        write_summary_report(result, log_dir / SUMMARY_REPORT_NAME),
    ]


def result_to_dict(result: RandomizationResult) -> dict[str, Any]:
    """Convert a run result to a JSON-serializable dict."""
    payload = result.model_dump(mode="json")
    payload["effect_index"] = result.effect_index()
    return payload


def save_json(result: RandomizationResult, path: Path | str) -> None:
    """Save the run result to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(result_to_dict(result), f, indent=2, default=str)
