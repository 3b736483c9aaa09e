# Overview: Face descriptor validation and the match decision rule.

"""
Face Match Decision Rule

Descriptors are the 128-float embeddings produced in the browser by
face-api.js. The server never sees images; it compares a freshly
captured descriptor against the one recorded at enrollment.

RULE: match iff euclidean distance < FACE_MATCH_THRESHOLD (0.4).
The threshold is fixed for every driver.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

FACE_MATCH_THRESHOLD = 0.4
DESCRIPTOR_LENGTH = 128


class FaceDescriptorError(ValueError):
    """Raised for malformed or incomparable descriptors."""
    pass


@dataclass(frozen=True)
class FaceMatchResult:
    matched: bool
    distance: float | None
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "matched": self.matched,
            "distance": round(self.distance, 6) if self.distance is not None else None,
            "threshold": FACE_MATCH_THRESHOLD,
            "reason": self.reason,
        }


def validate_descriptor(value: Any, *, length: int = DESCRIPTOR_LENGTH) -> list[float]:
    """Return value as a list of finite floats of the expected length."""
    if not isinstance(value, (list, tuple)):
        raise FaceDescriptorError("Face descriptor must be a list of numbers")
    if len(value) != length:
        raise FaceDescriptorError(f"Face descriptor must have {length} values, got {len(value)}")

    descriptor = []
    for component in value:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise FaceDescriptorError("Face descriptor must contain only numbers")
        if not math.isfinite(component):
            raise FaceDescriptorError("Face descriptor values must be finite")
        descriptor.append(float(component))
    return descriptor


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise FaceDescriptorError(
            f"Cannot compare descriptors of different lengths ({len(a)} vs {len(b)})"
        )
    return math.dist(a, b)


def is_face_match(captured: Sequence[float] | None, stored: Sequence[float] | None) -> bool:
    return compare_faces(captured, stored).matched


def compare_faces(captured: Sequence[float] | None, stored: Sequence[float] | None) -> FaceMatchResult:
    """
    Apply the decision rule.

    No captured descriptor means no face was detected in the frame; no
    stored descriptor means the driver never enrolled. Both are non-matches,
    not errors.
    """
    if not stored:
        return FaceMatchResult(matched=False, distance=None, reason="not_enrolled")
    if not captured:
        return FaceMatchResult(matched=False, distance=None, reason="no_face_detected")

    distance = euclidean_distance(captured, stored)
    if distance < FACE_MATCH_THRESHOLD:
        return FaceMatchResult(matched=True, distance=distance)
    return FaceMatchResult(matched=False, distance=distance, reason="no_match")
