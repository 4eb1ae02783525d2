"""Read-only project specification collaborator.

The specification lists the focus card, invariants and CUTs a project is
being built against.  Plugin definitions may name invariant or CUT ids in
``relatedInvariants`` / ``relatedCuts``; the engine carries those through to
results but never checks them against this document.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from acceptance_engine.config import EngineSettings
from acceptance_engine.errors import ProjectSpecError

logger = logging.getLogger(__name__)


class FocusCard(BaseModel):
    focus_card_id: str
    title: str
    goal: str
    deliverables: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    non_goals: list[str] = Field(default_factory=list)
    sources_of_truth: list[str] = Field(default_factory=list)
    token_budget: int | None = None


class Invariant(BaseModel):
    id: str
    text: str


class Cut(BaseModel):
    id: str
    text: str
    examples: list[str] | None = None


class ProjectSpec(BaseModel):
    """The project's declared focus, invariants and CUTs."""

    focus_card: FocusCard
    invariants: list[Invariant] = Field(default_factory=list)
    cuts: list[Cut] = Field(default_factory=list)

    def invariant_ids(self) -> list[str]:
        return [inv.id for inv in self.invariants]

    def cut_ids(self) -> list[str]:
        return [cut.id for cut in self.cuts]


def load_project_spec(root: Path | str, settings: EngineSettings | None = None) -> ProjectSpec | None:
    """Load the project specification under *root*, if one exists.

    Returns
    -------
    ProjectSpec | None
        ``None`` when the spec file is absent.

    Raises
    ------
    ProjectSpecError
        If the file exists but cannot be read, parsed or validated.
    """
    settings = settings or EngineSettings()
    path = settings.spec_path(root)
    if not path.exists():
        logger.debug("No project spec at '%s'.", path)
        return None

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectSpecError(str(path), str(exc)) from exc

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ProjectSpecError(str(path), f"invalid JSON ({exc})") from exc

    try:
        spec = ProjectSpec.model_validate(data)
    except ValidationError as exc:
        raise ProjectSpecError(str(path), f"{exc.error_count()} schema error(s)") from exc

    logger.debug(
        "Loaded project spec with %d invariant(s) and %d CUT(s).",
        len(spec.invariants),
        len(spec.cuts),
    )
    return spec
