"""Selection score model."""

from __future__ import annotations

from dataclasses import dataclass

from declutter.models.node import Node


@dataclass(frozen=True, slots=True)
class NodeScore:
    """Heuristic deletion-candidate score for one node.

    All scores are normalized to the [0, 1] range; 0.5 is neutral.

    Attributes:
        node: Scored node (not owned by the score).
        age_score: How far the node lies beyond the age cutoff.
        size_score: How far the node lies beyond the size threshold.
        combined_score: Weighted average of age and size scores.
    """

    node: Node
    age_score: float
    size_score: float
    combined_score: float

    def __post_init__(self) -> None:
        """Validate score ranges after initialization."""
        for label, value in (
            ("age_score", self.age_score),
            ("size_score", self.size_score),
            ("combined_score", self.combined_score),
        ):
            if not (0.0 <= value <= 1.0):
                msg = f"{label} must be between 0.0 and 1.0, got {value}"
                raise ValueError(msg)
