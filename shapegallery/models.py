"""Pydantic models describing the outcome of a gallery consistency check."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InconsistencyKind(str, Enum):
    """Kinds of divergence between the gallery document and its mirror."""

    STRUCTURAL_DUPLICATE = "structuralDuplicate"
    ORPHAN_IMAGE = "orphanImage"
    MISSING_IMAGE = "missingImage"
    ORPHAN_CATEGORY_FOLDER = "orphanCategoryFolder"
    IMPORT_NAME_COLLISION = "importNameCollision"
    UNSAFE_SHAPE_NAME = "unsafeShapeName"


# Kinds that only ever get resolved, never reported as corruption
TOLERATED_KINDS = frozenset(
    {InconsistencyKind.IMPORT_NAME_COLLISION, InconsistencyKind.UNSAFE_SHAPE_NAME}
)


class ConsistencyIssue(BaseModel):
    """A single inconsistency found (and usually repaired) during a check."""

    model_config = ConfigDict(frozen=True)

    kind: InconsistencyKind = Field(description="Inconsistency kind")
    category: str | None = Field(default=None, description="Category the issue belongs to")
    subject: str = Field(description="Shape, image or folder name involved")
    message: str = Field(description="Human-readable description")
    repaired: bool = Field(default=True, description="Whether the engine repaired it")


class ConsistencyReport(BaseModel):
    """Aggregated result of one consistency pass over a gallery."""

    model_config = ConfigDict(frozen=True)

    imported: bool = Field(default=False, description="Checked in imported-file mode")
    categories: list[str] = Field(default_factory=list, description="Final category names")
    default_category: str | None = Field(default=None)

    duplicate_found: bool = Field(default=False)
    image_lost: bool = Field(default=False)
    shape_lost: bool = Field(default=False)
    orphan_category_found: bool = Field(default=False)

    issues: list[ConsistencyIssue] = Field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """True when no flag was raised."""
        return not (
            self.duplicate_found
            or self.image_lost
            or self.shape_lost
            or self.orphan_category_found
        )

    @property
    def passed(self) -> bool:
        """Whether the gallery may be opened.

        Inconsistencies are tolerated silently in imported-file mode.
        """
        return self.is_consistent or self.imported

    def issues_of(self, kind: InconsistencyKind) -> list[ConsistencyIssue]:
        """Return the issues of one kind."""
        return [issue for issue in self.issues if issue.kind == kind]

    def summary(self) -> str:
        """User-facing corruption report."""
        if self.is_consistent:
            return "The shape gallery is consistent."

        lines = [
            "The shape gallery is corrupted. Repairs have been applied where "
            "possible, but the gallery cannot be used until it is checked."
        ]
        for issue in self.issues:
            if issue.kind in TOLERATED_KINDS:
                continue
            where = f"[{issue.category}] " if issue.category else ""
            suffix = "" if issue.repaired else " (not repaired)"
            lines.append(f"  - {where}{issue.message}{suffix}")
        return "\n".join(lines)
