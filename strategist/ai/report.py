"""Per-turn planning reports, renderable with Rich and exportable to polars."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Sequence

import polars as pl
from polars._typing import PolarsDataType

from ..model.units import AIUnit

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .planner import PlanningResult, Quotas

_REPORT_SCHEMA: dict[str, PolarsDataType] = {
    "turn": pl.Int64,
    "iteration": pl.Int64,
    "unit": pl.String,
    "unit_type": pl.String,
    "reason": pl.String,
    "mission": pl.String,
    "target": pl.String,
}


@dataclass
class UnitLine:
    """Why one unit holds the mission it ends a planning pass with."""

    iteration: int
    unit: str
    unit_type: str
    reason: str
    mission: str
    target: str


@dataclass
class TurnReport:
    """Everything the orchestrator decided for one faction in one turn."""

    owner: str
    turn: int
    quotas: Quotas | None = None
    lines: List[UnitLine] = field(default_factory=list)
    assignments: List[str] = field(default_factory=list)
    stance_changes: List[str] = field(default_factory=list)
    purchases: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    iterations: int = 0

    def record_planning(
        self, iteration: int, result: PlanningResult, units: Iterable[AIUnit]
    ) -> None:
        self.iterations = max(self.iterations, iteration)
        if self.quotas is None:
            self.quotas = result.quotas
        for ai_unit in units:
            reason = result.reasons.get(ai_unit.identifier)
            if reason is None:
                continue
            mission = ai_unit.mission
            self.lines.append(
                UnitLine(
                    iteration=iteration,
                    unit=ai_unit.identifier,
                    unit_type=ai_unit.unit.unit_type,
                    reason=reason,
                    mission=mission.kind.value if mission else "none",
                    target=str(mission.target) if mission and mission.target is not None else "",
                )
            )
        for transportable, carrier in result.assignments:
            self.assignments.append(f"{transportable.identifier} -> {carrier.identifier}")

    def as_frame(self) -> pl.DataFrame:
        rows = [
            (
                self.turn,
                line.iteration,
                line.unit,
                line.unit_type,
                line.reason,
                line.mission,
                line.target,
            )
            for line in self.lines
        ]
        return pl.DataFrame(rows, schema=_REPORT_SCHEMA, orient="row")

    def mission_counts(self) -> pl.DataFrame:
        """Number of units per mission kind at the end of the turn."""

        frame = self.as_frame()
        if frame.is_empty():
            return pl.DataFrame(schema={"mission": pl.String, "units": pl.UInt32})
        last = frame.group_by("unit", maintain_order=True).last()
        return (
            last.group_by("mission")
            .agg(pl.len().alias("units"))
            .sort(["units", "mission"], descending=[True, False])
        )

    def summary(self) -> str:
        quotas = self.quotas
        quota_text = (
            f"builders {quotas.builders}, scouts {quotas.scouts}, pioneers {quotas.pioneers}"
            if quotas is not None
            else "no quotas"
        )
        return (
            f"{self.owner} turn {self.turn}: {self.iterations} pass(es), "
            f"{len(self.assignments)} transport assignment(s), {quota_text}"
        )

    # Rendering helpers -------------------------------------------------
    def render_table(self, *, title: str | None = None):
        """Return a Rich renderable listing the final mission of each unit."""

        from rich import box
        from rich.panel import Panel
        from rich.table import Table

        title = title or f"{self.owner} - turn {self.turn}"
        table = Table(expand=True, box=box.SIMPLE_HEAVY)
        table.add_column("Unit", no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("Reason")
        table.add_column("Mission")
        table.add_column("Target", overflow="fold")

        latest: dict[str, UnitLine] = {}
        for line in self.lines:
            latest[line.unit] = line
        for line in latest.values():
            table.add_row(line.unit, line.unit_type, line.reason, line.mission, line.target or "-")

        notes = self.assignments + self.stance_changes + self.purchases + self.errors
        caption = "\n".join(notes) if notes else None
        table.caption = caption
        return Panel(table, title=title, subtitle=self.summary(), border_style="yellow")


class ReportChannel:
    """Keeps the most recent turn reports."""

    def __init__(self, *, max_entries: int = 50) -> None:
        self.max_entries = max_entries
        self._entries: List[TurnReport] = []

    @property
    def entries(self) -> Sequence[TurnReport]:
        return tuple(self._entries)

    def push(self, report: TurnReport) -> None:
        self._entries.append(report)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries :]

    def as_frame(self) -> pl.DataFrame:
        frames = [report.as_frame() for report in self._entries]
        if not frames:
            return pl.DataFrame(schema=_REPORT_SCHEMA)
        return pl.concat(frames)


__all__ = ["ReportChannel", "TurnReport", "UnitLine"]
