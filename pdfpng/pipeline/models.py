"""Page task and conversion result models."""

from collections import OrderedDict
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class PageStatus(str, Enum):
    """Lifecycle of a single page conversion, in forward order."""
    PENDING = "pending"
    PROCESSING = "processing"
    SAVING = "saving"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PageStatus.COMPLETED, PageStatus.ERROR)


_STATUS_ORDER = {status: index for index, status in enumerate(PageStatus)}


@dataclass
class PageTask:
    """Conversion state of one selected page."""
    page_number: int
    status: PageStatus = PageStatus.PENDING
    artifact_name: Optional[str] = None
    error_message: Optional[str] = None
    location: Optional[str] = None

    def advance(self, status: PageStatus) -> None:
        """Move to a later status; statuses never regress or leave a terminal state."""
        if self.status.is_terminal:
            raise ValueError(
                f"Page {self.page_number} is already {self.status.value}"
            )
        if _STATUS_ORDER[status] <= _STATUS_ORDER[self.status]:
            raise ValueError(
                f"Page {self.page_number} cannot move from "
                f"{self.status.value} to {status.value}"
            )
        self.status = status

    def complete(self, artifact_name: str, location: Optional[str] = None) -> None:
        self.advance(PageStatus.COMPLETED)
        self.artifact_name = artifact_name
        self.location = location

    def fail(self, message: str) -> None:
        self.advance(PageStatus.ERROR)
        self.error_message = message

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class ConversionResult:
    """Artifacts of completed pages, keyed by artifact name in completion order."""

    def __init__(self):
        self._artifacts: "OrderedDict[str, bytes]" = OrderedDict()

    def add(self, name: str, data: bytes) -> None:
        self._artifacts[name] = data

    def clear(self) -> None:
        self._artifacts.clear()

    def names(self) -> List[str]:
        return list(self._artifacts)

    def entries(self) -> List[Tuple[str, bytes]]:
        """Ordered (name, bytes) pairs, ready for an ArchiveBuilder."""
        return list(self._artifacts.items())

    def __getitem__(self, name: str) -> bytes:
        return self._artifacts[name]

    def __contains__(self, name: object) -> bool:
        return name in self._artifacts

    def __iter__(self) -> Iterator[str]:
        return iter(self._artifacts)

    def __len__(self) -> int:
        return len(self._artifacts)
