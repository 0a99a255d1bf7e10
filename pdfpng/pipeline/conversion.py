"""Sequential page conversion pipeline."""

import logging
import re
from pathlib import PurePosixPath
from typing import Callable, List, Optional, Sequence, Tuple

from ..exceptions import RenderFailure
from ..sinks.base import ArtifactSink
from ..sources.base import Document
from .models import ConversionResult, PageStatus, PageTask

logger = logging.getLogger(__name__)

StatusListener = Callable[[PageTask], None]

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def base_name_for(filename: str) -> str:
    """
    Artifact prefix for a source file name: directory components are
    dropped and a trailing .pdf extension (any case) is stripped.
    """
    name = PurePosixPath(filename.replace("\\", "/")).name
    return _PDF_SUFFIX.sub("", name) or "document"


def artifact_name(base_name: str, page_number: int, extension: str = "png") -> str:
    """Deterministic artifact name: <base>_page_<n>.<ext>."""
    return f"{base_name}_page_{page_number}.{extension}"


class ConversionPipeline:
    """
    Converts selected pages of a document one at a time.

    Each page moves pending -> processing -> saving -> completed, or ends in
    error. A failed page never stops the run. Listeners are notified after
    every status change with the task that changed.
    """

    def __init__(
        self,
        sink: ArtifactSink,
        extension: str = "png",
        listeners: Optional[Sequence[StatusListener]] = None,
    ):
        self.sink = sink
        self.extension = extension
        self._listeners: List[StatusListener] = list(listeners or [])
        self._tasks: List[PageTask] = []

    @property
    def tasks(self) -> Tuple[PageTask, ...]:
        """Tasks of the current (or last) run, in selection order."""
        return tuple(self._tasks)

    def subscribe(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def run(
        self,
        selection: Sequence[int],
        document: Document,
        base_name: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert every page in the selection.

        Args:
            selection: Ordered page numbers (1-indexed)
            document: Loaded source document
            base_name: Prefix for artifact names; derived from the document
                       name when omitted

        Returns:
            ConversionResult holding the artifacts of completed pages
        """
        if base_name is None:
            base_name = base_name_for(document.name)

        self._tasks = [PageTask(page_number=n) for n in selection]
        for task in self._tasks:
            self._notify(task)

        result = ConversionResult()
        logger.info(
            f"Converting {len(self._tasks)} page(s) of '{document.name}'"
        )

        for task in self._tasks:
            self._process(task, document, base_name, result)

        completed = sum(1 for t in self._tasks if t.status == PageStatus.COMPLETED)
        logger.info(
            f"Conversion finished: {completed}/{len(self._tasks)} page(s) completed"
        )
        return result

    def _process(
        self,
        task: PageTask,
        document: Document,
        base_name: str,
        result: ConversionResult,
    ) -> None:
        page_number = task.page_number
        self._transition(task, PageStatus.PROCESSING)

        try:
            data = document.render_page(page_number)
            if not data:
                raise RenderFailure(page_number)
        except Exception as e:
            logger.warning(f"Render failed on page {page_number}: {e}")
            self._fail(task, str(e) or f"Failed to render page {page_number}")
            return

        self._transition(task, PageStatus.SAVING)
        name = artifact_name(base_name, page_number, self.extension)

        try:
            location = self.sink.save(name, data)
        except Exception as e:
            logger.warning(f"Saving {name} failed: {e}")
            self._fail(task, str(e) or f"Failed to save {name}")
            return

        task.complete(name, location)
        result.add(name, data)
        self._notify(task)

    def _transition(self, task: PageTask, status: PageStatus) -> None:
        task.advance(status)
        self._notify(task)

    def _fail(self, task: PageTask, message: str) -> None:
        task.fail(message)
        self._notify(task)

    def _notify(self, task: PageTask) -> None:
        logger.debug(f"Page {task.page_number}: {task.status.value}")
        for listener in self._listeners:
            try:
                listener(task)
            except Exception:
                logger.exception(
                    f"Status listener failed for page {task.page_number} ({task.status.value})"
                )
