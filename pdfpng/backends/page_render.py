"""PDF page to image rendering backend."""

import logging
from typing import Dict, Any, Optional, Tuple

from .base import Backend
from ..converters.archive_builder import ZipArchiveBuilder
from ..pipeline.conversion import ConversionPipeline, base_name_for
from ..pipeline.models import PageStatus
from ..sinks.base import ArtifactSink
from ..sinks.directory import DirectorySink, check_output_dir
from ..sinks.http_upload import HttpUploadSink, check_upload_url, content_type_for
from ..sinks.memory import MemorySink
from ..sources.base import SourceLoader
from ..sources.pymupdf_source import PyMuPDFSourceLoader
from ..utils.page_filter import parse_page_range

logger = logging.getLogger(__name__)


class PageRenderBackend(Backend):
    """
    Renders selected PDF pages to images and bundles them into a zip.

    Options:
        pages: page range expression; empty means every page
        filename: original file name, used for artifact names
        output_dir: write artifacts into this local directory
        save_url: upload artifacts to this save-file endpoint
                  (``output_dir`` is then forwarded as ``outputDir``)

    ``output_dir`` and ``save_url`` come from the client. Outside a trusted
    local setup, restrict them with ``SAVE_OUTPUT_ROOT`` and
    ``SAVE_URL_ALLOWLIST``; a value outside those limits is a ValueError.
    """

    SUPPORTED_OPERATIONS = ["render_pages"]

    def __init__(
        self,
        loader: Optional[SourceLoader] = None,
        archive_builder: Optional[ZipArchiveBuilder] = None,
    ):
        self.loader = loader or PyMuPDFSourceLoader()
        self.archive_builder = archive_builder or ZipArchiveBuilder()

    def supports(self, operation: str, format: str = "") -> bool:
        return operation in self.SUPPORTED_OPERATIONS

    def process(
        self,
        data: bytes,
        operation: str,
        options: Dict[str, str]
    ) -> Tuple[bytes, str, Dict[str, Any]]:
        if not self.supports(operation):
            raise ValueError(f"Operation '{operation}' not supported")

        filename = options.get("filename") or "document.pdf"
        page_range = options.get("pages", "")

        extension = getattr(self.loader, "image_format", "png")
        sink = self._make_sink(options, extension)
        try:
            document = self.loader.load(data, filename)
        except Exception:
            self._close_sink(sink)
            raise

        total_pages = document.page_count
        try:
            selection = parse_page_range(page_range, total_pages)
            if not selection:
                raise ValueError(f"No valid pages selected from '{page_range}'")

            pipeline = ConversionPipeline(sink, extension=extension)
            result = pipeline.run(selection, document, base_name_for(filename))
        finally:
            document.close()
            self._close_sink(sink)

        tasks = pipeline.tasks
        archive = self.archive_builder.build(result.entries())

        metadata = {
            "total_pages": total_pages,
            "pages_requested": len(tasks),
            "pages_completed": sum(1 for t in tasks if t.status == PageStatus.COMPLETED),
            "pages_failed": sum(1 for t in tasks if t.status == PageStatus.ERROR),
            "sink": type(sink).__name__,
            "tasks": [t.to_dict() for t in tasks],
        }

        return archive, "zip", metadata

    def _make_sink(self, options: Dict[str, str], extension: str) -> ArtifactSink:
        save_url = options.get("save_url", "")
        output_dir = options.get("output_dir", "")
        if save_url:
            return HttpUploadSink(
                check_upload_url(save_url),
                output_dir=output_dir or None,
                content_type=content_type_for(extension),
            )
        if output_dir:
            return DirectorySink(check_output_dir(output_dir))
        return MemorySink()

    def _close_sink(self, sink: ArtifactSink) -> None:
        if isinstance(sink, HttpUploadSink):
            sink.close()
