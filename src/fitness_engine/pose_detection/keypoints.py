"""
keypoints.py - Pose data model consumed by the exercise analyzers.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

KEYPOINT_NAMES = (
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
)


@dataclass(frozen=True)
class Keypoint:
    """A named anatomical landmark in image coordinates (y grows downward)."""
    name: str
    x: float
    y: float
    confidence: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Keypoint":
        name = data.get("name")
        if name not in KEYPOINT_NAMES:
            raise ValueError(f"Unknown keypoint name: {name!r}")
        # Older producers call the confidence field "score"
        confidence = data.get("confidence", data.get("score"))
        if confidence is None:
            raise ValueError(f"Keypoint {name} has no confidence value")
        return cls(name=name, x=float(data["x"]), y=float(data["y"]), confidence=float(confidence))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "x": self.x, "y": self.y, "confidence": self.confidence}


@dataclass(frozen=True)
class Pose:
    """One frame of detected keypoints. Read-only to the engine."""
    keypoints: Tuple[Keypoint, ...]
    confidence: float = 1.0
    timestamp: Optional[float] = None  # ms, only set for recorded streams
    _index: Dict[str, Keypoint] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        keypoints = tuple(self.keypoints)
        object.__setattr__(self, "keypoints", keypoints)
        object.__setattr__(self, "_index", {kp.name: kp for kp in keypoints})

    def __iter__(self) -> Iterator[Keypoint]:
        return iter(self.keypoints)

    def find(self, name: str) -> Optional[Keypoint]:
        """Return the keypoint with the given name regardless of confidence."""
        return self._index.get(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pose":
        """
        Build a pose from the producer's wire format.

        Args:
            data: {"keypoints": [{name, x, y, confidence}], "confidence": float, "timestamp"?: ms}

        Returns:
            Pose instance
        """
        if "keypoints" not in data:
            raise ValueError("Pose record has no 'keypoints' field")
        keypoints = tuple(Keypoint.from_dict(kp) for kp in data["keypoints"])
        confidence = data.get("confidence", data.get("score", 1.0))
        timestamp = data.get("timestamp")
        return cls(
            keypoints=keypoints,
            confidence=float(confidence),
            timestamp=float(timestamp) if timestamp is not None else None,
        )

    @classmethod
    def from_points(cls, points: Dict[str, Tuple[float, float]], confidence: float = 0.9,
                    timestamp: Optional[float] = None) -> "Pose":
        """Convenience constructor from {name: (x, y)} with a uniform confidence."""
        keypoints = tuple(Keypoint(name, float(x), float(y), confidence) for name, (x, y) in points.items())
        return cls(keypoints=keypoints, confidence=confidence, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        data = {"keypoints": [kp.to_dict() for kp in self.keypoints], "confidence": self.confidence}
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data
