"""Per-pass state shared by the consistency steps."""

from dataclasses import dataclass, field

from shapegallery.document.base import GalleryShape
from shapegallery.models import ConsistencyIssue, InconsistencyKind


@dataclass
class ReconciliationContext:
    """Mutable state threaded through one consistency pass.

    One context is created per pass, so several galleries can be checked
    independently.
    """
    imported: bool = False
    untitled_count: int = 0
    # Category position -> its name box
    name_boxes: dict[int, GalleryShape] = field(default_factory=dict)
    # Category names already given out in this pass
    claimed_names: set[str] = field(default_factory=set)
    issues: list[ConsistencyIssue] = field(default_factory=list)

    def next_untitled(self) -> int:
        """Advance and return the untitled-category counter."""
        self.untitled_count += 1
        return self.untitled_count

    def is_name_box(self, category_position: int, shape: GalleryShape) -> bool:
        """Whether ``shape`` is the registered name box of a category."""
        name_box = self.name_boxes.get(category_position)
        return name_box is not None and name_box.shape_id == shape.shape_id

    def record(
        self,
        kind: InconsistencyKind,
        subject: str,
        message: str,
        category: str | None = None,
        repaired: bool = True,
    ) -> ConsistencyIssue:
        """Record an inconsistency found during the pass."""
        issue = ConsistencyIssue(
            kind=kind,
            category=category,
            subject=subject,
            message=message,
            repaired=repaired,
        )
        self.issues.append(issue)
        return issue
