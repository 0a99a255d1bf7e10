"""Tests for conversion backends."""

import io
import zipfile

import pymupdf
import pytest

from pdfpng.backends.image_merge import ImageMergeBackend
from pdfpng.backends.page_render import PageRenderBackend
from pdfpng.converters.archive_builder import ZipArchiveBuilder
from pdfpng.sinks.http_upload import HttpUploadSink
from pdfpng.sources.pymupdf_source import PyMuPDFSourceLoader


def create_test_pdf(page_count=3):
    """Create a simple multi-page test PDF using PyMuPDF."""
    doc = pymupdf.open()
    for i in range(page_count):
        page = doc.new_page(width=300, height=400)
        page.insert_text(pymupdf.Point(72, 72), f"Page {i + 1} content", fontsize=12)
    pdf_bytes = doc.tobytes()
    doc.close()
    return pdf_bytes


def create_test_image(width, height):
    pix = pymupdf.Pixmap(pymupdf.csRGB, pymupdf.IRect(0, 0, width, height), False)
    pix.clear_with(200)
    return pix.tobytes("png")


def archive_names(data):
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.namelist()


# --- Backend Support Tests ---

class TestBackendSupport:
    """Tests for backend operation support."""

    def test_render_supports_render_pages(self):
        backend = PageRenderBackend()
        assert backend.supports("render_pages")
        assert not backend.supports("merge_images")

    def test_merge_supports_merge_images(self):
        backend = ImageMergeBackend()
        assert backend.supports("merge_images")
        assert not backend.supports("render_pages")


# --- Page Render Tests ---

class TestPageRenderBackend:
    """Tests for PageRenderBackend with real PDFs."""

    def setup_method(self):
        self.backend = PageRenderBackend(loader=PyMuPDFSourceLoader(scale=1.0))

    def test_render_all_pages(self):
        output, fmt, metadata = self.backend.process(
            create_test_pdf(), "render_pages", {"filename": "Report.PDF"}
        )

        assert fmt == "zip"
        assert archive_names(output) == [
            "Report_page_1.png",
            "Report_page_2.png",
            "Report_page_3.png",
        ]
        assert metadata["pages_completed"] == 3
        assert metadata["pages_failed"] == 0
        assert metadata["sink"] == "MemorySink"
        assert [t["status"] for t in metadata["tasks"]] == ["completed"] * 3

    def test_render_page_range(self):
        output, fmt, metadata = self.backend.process(
            create_test_pdf(5), "render_pages", {"filename": "doc.pdf", "pages": "4-2,9,x"}
        )

        assert archive_names(output) == ["doc_page_2.png", "doc_page_3.png", "doc_page_4.png"]
        assert metadata["pages_requested"] == 3
        assert metadata["total_pages"] == 5

    def test_render_to_directory(self, tmp_path):
        output, fmt, metadata = self.backend.process(
            create_test_pdf(2), "render_pages",
            {"filename": "doc.pdf", "output_dir": str(tmp_path)},
        )

        assert metadata["sink"] == "DirectorySink"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["doc_page_1.png", "doc_page_2.png"]
        assert metadata["tasks"][0]["location"] == str(tmp_path / "doc_page_1.png")

    def test_empty_selection_rejected(self):
        with pytest.raises(ValueError, match="No valid pages"):
            self.backend.process(create_test_pdf(2), "render_pages", {"pages": "7-9x"})

    def test_invalid_pdf(self):
        with pytest.raises(ValueError, match="Invalid or corrupted PDF"):
            self.backend.process(b"%PDF-garbage", "render_pages", {})

    def test_unsupported_operation(self):
        with pytest.raises(ValueError):
            self.backend.process(create_test_pdf(), "merge_images", {})

    def test_upload_sink_content_type_follows_format(self):
        backend = PageRenderBackend(loader=PyMuPDFSourceLoader(scale=1.0, image_format="jpg"))
        sink = backend._make_sink({"save_url": "http://saver/save"}, "jpg")
        try:
            assert isinstance(sink, HttpUploadSink)
            assert sink.content_type == "image/jpeg"
        finally:
            sink.close()

    def test_jpeg_rendering_names(self):
        backend = PageRenderBackend(loader=PyMuPDFSourceLoader(scale=1.0, image_format="jpg"))
        output, fmt, metadata = backend.process(create_test_pdf(1), "render_pages", {"filename": "a.pdf"})
        assert archive_names(output) == ["a_page_1.jpg"]


# --- Image Merge Tests ---

class TestImageMergeBackend:
    """Tests for ImageMergeBackend."""

    def setup_method(self):
        self.backend = ImageMergeBackend()

    def test_merge_archive_in_order(self):
        archive = ZipArchiveBuilder().build([
            ("second.png", create_test_image(50, 100)),
            ("first.png", create_test_image(100, 50)),
        ])

        output, fmt, metadata = self.backend.process(archive, "merge_images", {})

        assert fmt == "pdf"
        assert metadata["images"] == ["second.png", "first.png"]
        doc = pymupdf.open(stream=output, filetype="pdf")
        try:
            assert len(doc) == 2
        finally:
            doc.close()

    def test_empty_archive_rejected(self):
        with pytest.raises(ValueError, match="no images"):
            self.backend.process(ZipArchiveBuilder().build([]), "merge_images", {})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
