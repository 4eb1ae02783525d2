"""Data models for acceptance-check plugins.

Defines the five plugin definition variants (a closed union discriminated
by ``kind``), the result and external-check records, and the diagnostics
returned by the loader.  Definitions mirror the hand-written JSON wire
format: field names and defaults are a compatibility surface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from acceptance_engine.errors import ErrorCode
from acceptance_engine.project_spec import ProjectSpec

CheckMode = Literal["all", "any"]


class PluginKind(str, Enum):
    """Discriminator values of the supported check kinds."""

    GREP = "grep"
    FILE_EXISTS = "file_exists"
    JSONPATH = "jsonpath"
    MULTI_GREP = "multi_grep"
    GLOB = "glob"


class PluginStatus(str, Enum):
    """Outcome of a single plugin execution."""

    PASS = "PASS"
    FAIL = "FAIL"


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


class _DefinitionModel(BaseModel):
    # Strict: "true" is not a boolean and 3 is not a string in a plugin file.
    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True, extra="ignore")


class _PluginBase(_DefinitionModel):
    id: str
    title: str = ""
    report_as: str | None = None
    related_cuts: list[str] | None = Field(default=None, alias="relatedCuts")
    related_invariants: list[str] | None = Field(default=None, alias="relatedInvariants")

    @property
    def display_id(self) -> str:
        """Id shown in reports: ``report_as`` when set, else ``id``."""
        return self.report_as or self.id


class GrepPlugin(_PluginBase):
    kind: Literal["grep"]
    file: str
    pattern: str
    flags: str = ""
    must_exist: bool = True


class FileExistsPlugin(_PluginBase):
    kind: Literal["file_exists"]
    file: str
    should_exist: bool = True


class JsonPathPlugin(_PluginBase):
    kind: Literal["jsonpath"]
    file: str
    path: str
    equals: Any = None
    exists: bool = True

    @property
    def has_equals(self) -> bool:
        """True when ``equals`` was given, including an explicit ``null``."""
        return "equals" in self.model_fields_set


class MultiGrepItem(_DefinitionModel):
    file: str
    pattern: str
    flags: str = ""
    must_exist: bool = True
    label: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or f"{self.pattern} in {self.file}"


class MultiGrepPlugin(_PluginBase):
    kind: Literal["multi_grep"]
    checks: list[MultiGrepItem] = Field(min_length=1)
    mode: CheckMode = "all"


class GlobEachGrep(_DefinitionModel):
    pattern: str
    flags: str = ""
    must_exist: bool = True


class GlobPlugin(_PluginBase):
    kind: Literal["glob"]
    pattern: str
    ignore: list[str] = Field(default_factory=list)
    dot: bool = False
    min: int | None = Field(default=1, ge=0)
    max: int | None = Field(default=None, ge=0)
    each_grep: GlobEachGrep | None = None
    each_mode: CheckMode = "all"


PluginDefinition = Annotated[
    Union[GrepPlugin, FileExistsPlugin, JsonPathPlugin, MultiGrepPlugin, GlobPlugin],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class PluginResult(BaseModel):
    """The outcome of one plugin definition in one run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Display id: report_as when set, else the plugin id.")
    plugin_id: str = Field(..., description="The definition's original id.")
    title: str = Field(default="", description="Human-readable check title.")
    status: PluginStatus
    evidence: str | None = Field(default=None, description="Why the check passed or failed.")
    related_cuts: list[str] | None = None
    related_invariants: list[str] | None = None

    @property
    def passed(self) -> bool:
        return self.status == PluginStatus.PASS


class ExternalCheck(BaseModel):
    """Reduced result shape merged into a caller-owned post-check record."""

    id: str
    status: PluginStatus
    evidence: str


# ---------------------------------------------------------------------------
# Validation and diagnostics
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """One schema violation found in a raw plugin definition."""

    loc: str = Field(default="", description="Dotted path of the offending field.")
    message: str
    type: str = Field(default="", description="Machine-readable error type.")
    input_type: str = Field(default="", description="Python type name of the offending value.")
    expected: str | None = Field(default=None, description="Expected tags or shape, when known.")

    def __str__(self) -> str:
        return f"{self.loc or '<root>'}: {self.message}"


class Diagnostic(BaseModel):
    """A non-fatal problem found while loading plugin definitions."""

    code: ErrorCode
    message: str
    file: str | None = None
    issues: list[ValidationIssue] = Field(default_factory=list)


class PluginRunReport(BaseModel):
    """Results of one run plus the diagnostics from loading its definitions."""

    results: list[PluginResult] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status == PluginStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == PluginStatus.FAIL)

    @property
    def all_passed(self) -> bool:
        """True when every result passed and nothing failed to load."""
        return self.failed == 0 and not self.diagnostics


@dataclass(frozen=True)
class PluginValidation:
    """Outcome of validating one raw definition: a definition or issues."""

    definition: GrepPlugin | FileExistsPlugin | JsonPathPlugin | MultiGrepPlugin | GlobPlugin | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.definition is not None


# ---------------------------------------------------------------------------
# Execution context
# ---------------------------------------------------------------------------


class PluginContext(BaseModel):
    """Context passed to check implementations during execution."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(..., description="Project root that file paths resolve against.")
    spec: ProjectSpec | None = Field(
        default=None,
        description="Read-only project specification; available to checks but not read by the built-ins.",
    )
    evidence_max_chars: int = Field(default=400, description="Soft cap for aggregate evidence strings.")
    search_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Bound in seconds for a single pattern search; None leaves searches unbounded.",
    )
