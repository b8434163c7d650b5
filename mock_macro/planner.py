"""Rewrite planner: turn matched macro calls into a minimal set of mocks."""

from __future__ import annotations

from dataclasses import dataclass, field

from mock_macro.matcher import MatchResult, MockComponentRequest, MockImportRequest

__all__ = [
    "RewritePlan",
    "plan_rewrite",
]


@dataclass(slots=True)
class RewritePlan:
    """What to remove from the module and what to generate.

    Attributes
    ----------
    import_groups:
        Import mocks keyed by source module.  Groups keep the order in
        which each module was first mocked; requests keep source order.
    component_requests:
        Component mocks in source order.
    removals:
        Sorted character ranges of every recorded macro call.
    insertion_point:
        Offset where the generated block is spliced in.
    needs_facility_import:
        Whether the generated block must import the mocking facility.
    """
    import_groups: dict[str, list[MockImportRequest]] = field(default_factory=dict)
    component_requests: list[MockComponentRequest] = field(default_factory=list)
    removals: list[tuple[int, int]] = field(default_factory=list)
    insertion_point: int = 0
    needs_facility_import: bool = True

    @property
    def is_noop(self) -> bool:
        return not self.import_groups and not self.component_requests

    @property
    def statement_count(self) -> int:
        return len(self.import_groups) + len(self.component_requests)


def plan_rewrite(match: MatchResult) -> RewritePlan:
    """Group import mocks by module and collect removal ranges."""
    groups: dict[str, list[MockImportRequest]] = {}
    for request in match.imports:
        groups.setdefault(request.binding.from_, []).append(request)

    removals = sorted(
        [r.span for r in match.imports] + [r.span for r in match.components]
    )

    return RewritePlan(
        import_groups=groups,
        component_requests=list(match.components),
        removals=removals,
        insertion_point=match.insertion_point,
        needs_facility_import=not match.has_facility_import,
    )
