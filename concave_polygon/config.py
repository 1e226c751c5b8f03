"""
Configuration for convex decomposition.

Collects the numeric tolerances and thresholds used by the intersection,
visibility and slicing code so they can be tuned per input.
"""

from dataclasses import dataclass
import json
from pathlib import Path

from .geometry import INTERSECTION_TOLERANCE, ZERO_LENGTH_EPSILON
from .intersection import MAX_VISIBLE_CROSSINGS


# Perpendicular distance under which a vertex counts as lying on a cut line
SLICE_TOLERANCE = 1e-5

# Nested decomposition deeper than this is abandoned
MAX_DEPTH = 256


@dataclass
class DecompositionConfig:
    """
    Tolerances and limits for polygon decomposition.

    Attributes:
        intersection_tolerance: Parametric band for accepting segment intersections
        parallel_epsilon: Segments whose direction cross product is below this are parallel
        slice_tolerance: On-line tolerance when walking a ring during a segment cut
        max_visible_crossings: Edge crossings allowed before a connection is not visible
        max_depth: Recursion limit for decompose()
    """
    intersection_tolerance: float = INTERSECTION_TOLERANCE
    parallel_epsilon: float = ZERO_LENGTH_EPSILON
    slice_tolerance: float = SLICE_TOLERANCE
    max_visible_crossings: int = MAX_VISIBLE_CROSSINGS
    max_depth: int = MAX_DEPTH

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.intersection_tolerance < 0:
            errors.append(f"intersection_tolerance cannot be negative, got {self.intersection_tolerance}")
        if self.intersection_tolerance >= 0.5:
            errors.append(f"intersection_tolerance must be < 0.5, got {self.intersection_tolerance}")

        if self.parallel_epsilon < 0:
            errors.append(f"parallel_epsilon cannot be negative, got {self.parallel_epsilon}")

        if self.slice_tolerance < 0:
            errors.append(f"slice_tolerance cannot be negative, got {self.slice_tolerance}")

        if self.max_visible_crossings < 2:
            errors.append(f"max_visible_crossings must be >= 2, got {self.max_visible_crossings}")

        if self.max_depth < 1:
            errors.append(f"max_depth must be >= 1, got {self.max_depth}")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "intersection_tolerance": self.intersection_tolerance,
            "parallel_epsilon": self.parallel_epsilon,
            "slice_tolerance": self.slice_tolerance,
            "max_visible_crossings": self.max_visible_crossings,
            "max_depth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DecompositionConfig":
        """Create from dictionary."""
        return cls(
            intersection_tolerance=float(data.get("intersection_tolerance", INTERSECTION_TOLERANCE)),
            parallel_epsilon=float(data.get("parallel_epsilon", ZERO_LENGTH_EPSILON)),
            slice_tolerance=float(data.get("slice_tolerance", SLICE_TOLERANCE)),
            max_visible_crossings=int(data.get("max_visible_crossings", MAX_VISIBLE_CROSSINGS)),
            max_depth=int(data.get("max_depth", MAX_DEPTH)),
        )

    def save(self, filepath: Path | str) -> None:
        """Save configuration to JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Path | str) -> "DecompositionConfig":
        """Load configuration from JSON file."""
        filepath = Path(filepath)
        if not filepath.exists():
            return cls()  # Return defaults if file doesn't exist

        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)
