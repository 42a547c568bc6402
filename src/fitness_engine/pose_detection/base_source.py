import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Union

from .keypoints import KEYPOINT_NAMES, Pose

logger = logging.getLogger(__name__)


class BasePoseSource(ABC):
    """Base class for producers that feed poses to an exercise tracker."""

    @abstractmethod
    def poses(self) -> Iterator[Pose]:
        """
        Yield poses in capture order.

        Returns:
            Iterator of Pose frames
        """
        pass

    def get_keypoint_names(self) -> List[str]:
        """
        Get the list of keypoint names that this source provides.

        Returns:
            List of keypoint names
        """
        return list(KEYPOINT_NAMES)


class JsonlPoseSource(BasePoseSource):
    """Reads a recorded pose stream: one JSON pose frame per line."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def poses(self) -> Iterator[Pose]:
        with open(self.path, "r") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                    yield Pose.from_dict(record)
                except (json.JSONDecodeError, ValueError, KeyError) as e:
                    raise ValueError(f"{self.path}:{line_number}: invalid pose record: {e}") from e
        logger.debug(f"Finished reading poses from {self.path}")
