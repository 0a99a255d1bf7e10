"""HTTP server for the PDF page conversion service using FastAPI."""

import asyncio
import base64
import logging
import os
import time
from typing import Dict, Any, List, Optional

from fastapi import FastAPI, HTTPException, UploadFile, File, Form
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from .backends.base import Backend
from .backends.image_merge import ImageMergeBackend
from .backends.page_render import PageRenderBackend
from .config import get_config
from .exceptions import MergeFailure
from .sinks.directory import check_output_dir, resolve_output_dir

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


# Pydantic models
class ProcessRequest(BaseModel):
    """Request body for POST /process (base64 mode)."""
    operation: str = Field(..., description="Operation: render_pages, merge_images")
    data: str = Field(..., description="Base64-encoded PDF, or zip of images")
    options: Dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response body for GET /health."""
    status: str = "ok"
    operations: List[str]
    version: str = VERSION


def _check_size(size: int) -> None:
    config = get_config()
    max_bytes = config.render.max_file_size_mb * 1024 * 1024
    if size > max_bytes:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": f"File exceeds {config.render.max_file_size_mb}MB limit"},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PDF Page Conversion Service",
        description="Render PDF pages to PNG images and merge images into PDFs using PyMuPDF",
        version=VERSION,
    )

    backends: List[Backend] = [
        PageRenderBackend(),
        ImageMergeBackend(),
    ]

    supported_operations = set()
    for backend in backends:
        if hasattr(backend, "SUPPORTED_OPERATIONS"):
            supported_operations.update(backend.SUPPORTED_OPERATIONS)

    def find_backend(operation: str) -> Optional[Backend]:
        for backend in backends:
            if backend.supports(operation):
                return backend
        return None

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="ok",
            operations=sorted(list(supported_operations)),
            version=VERSION,
        )

    @app.get("/ready")
    async def readiness_check():
        return {"status": "ready"}

    @app.post("/api/convert")
    async def convert(
        file: UploadFile = File(...),
        pages: str = Form(""),
        output_dir: str = Form(""),
        save_url: str = Form(""),
    ):
        """Render selected PDF pages to PNG images via multipart upload."""
        start_time = time.time()

        pdf_data = await file.read()
        _check_size(len(pdf_data))

        logger.info(f"Convert request: file={file.filename}, size={len(pdf_data)} bytes, pages='{pages}'")

        backend = find_backend("render_pages")
        if backend is None:
            raise HTTPException(status_code=500, detail="Render backend not available")

        options = {"filename": file.filename or "document.pdf", "pages": pages}
        if output_dir:
            options["output_dir"] = output_dir
        if save_url:
            options["save_url"] = save_url

        try:
            archive, fmt, metadata = await asyncio.to_thread(
                backend.process, pdf_data, "render_pages", options
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail={"success": False, "error": str(e)})
        except Exception as e:
            logger.exception(f"Convert failed: {e}")
            raise HTTPException(status_code=500, detail={"success": False, "error": str(e)})

        processing_time_ms = int((time.time() - start_time) * 1000)
        tasks = metadata.pop("tasks")

        return {
            "success": True,
            "tasks": tasks,
            "archive": base64.b64encode(archive).decode("utf-8"),
            "format": "application/zip",
            "metadata": metadata,
            "processing_time_ms": processing_time_ms,
        }

    @app.post("/api/merge")
    async def merge(files: List[UploadFile] = File(...)):
        """Merge uploaded images, in upload order, into one PDF."""
        images = [await f.read() for f in files]
        _check_size(sum(len(i) for i in images))

        logger.info(f"Merge request: {len(images)} image(s)")

        backend = find_backend("merge_images")
        if backend is None:
            raise HTTPException(status_code=500, detail="Merge backend not available")

        try:
            pdf_data = await asyncio.to_thread(backend.merger.merge, images)
        except (ValueError, MergeFailure) as e:
            raise HTTPException(status_code=400, detail={"success": False, "error": str(e)})
        except Exception as e:
            logger.exception(f"Merge failed: {e}")
            raise HTTPException(status_code=500, detail={"success": False, "error": str(e)})

        return Response(
            content=pdf_data,
            media_type="application/pdf",
            headers={"Content-Disposition": 'attachment; filename="merged.pdf"'},
        )

    @app.post("/api/save-file")
    async def save_file(
        file: Optional[UploadFile] = File(None),
        filename: Optional[str] = Form(None),
        outputDir: Optional[str] = Form(None),
    ):
        """
        Write an uploaded artifact into the output directory.

        A client-supplied ``outputDir`` must lie inside ``SAVE_OUTPUT_ROOT``
        when that is configured.
        """
        if file is None or not filename:
            return JSONResponse(status_code=400, content={"error": "Missing file or filename"})
        if os.path.basename(filename) != filename or filename in (".", ".."):
            return JSONResponse(status_code=400, content={"error": "Invalid filename"})

        if outputDir and outputDir.strip():
            try:
                target_dir = check_output_dir(outputDir.strip())
            except ValueError as e:
                return JSONResponse(status_code=400, content={"error": str(e)})
        else:
            target_dir = resolve_output_dir(get_config().save.output_dir)

        try:
            data = await file.read()
            os.makedirs(target_dir, exist_ok=True)
            file_path = os.path.join(target_dir, filename)
            with open(file_path, "wb") as f:
                f.write(data)
        except Exception as e:
            logger.exception(f"Error saving file: {e}")
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

        logger.info(f"Saved {filename} ({len(data)} bytes) to {target_dir}")
        return {"success": True, "path": file_path}

    @app.post("/process")
    async def process_document(request: ProcessRequest) -> Dict[str, Any]:
        """Process a base64-encoded payload (compatible with pyworker pattern)."""
        start_time = time.time()

        try:
            document_data = base64.b64decode(request.data, validate=True)
        except Exception as e:
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": {"code": "INVALID_BASE64", "message": str(e)}}
            )

        config = get_config()
        max_bytes = config.render.max_file_size_mb * 1024 * 1024
        if len(document_data) > max_bytes:
            raise HTTPException(
                status_code=400,
                detail={
                    "success": False,
                    "error": {
                        "code": "FILE_TOO_LARGE",
                        "message": f"File exceeds {config.render.max_file_size_mb}MB limit",
                    }
                }
            )

        backend = find_backend(request.operation)
        if backend is None:
            raise HTTPException(
                status_code=400,
                detail={
                    "success": False,
                    "error": {
                        "code": "INVALID_OPERATION",
                        "message": f"Operation '{request.operation}' is not supported",
                        "details": {"supported_operations": sorted(list(supported_operations))},
                    }
                }
            )

        try:
            output_data, output_format, metadata = await asyncio.to_thread(
                backend.process, document_data, request.operation, request.options
            )
        except (ValueError, MergeFailure) as e:
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": {"code": "VALIDATION_ERROR", "message": str(e)}}
            )
        except Exception as e:
            logger.exception(f"Processing error: {e}")
            raise HTTPException(
                status_code=500,
                detail={"success": False, "error": {"code": "PROCESSING_FAILED", "message": str(e)}}
            )

        processing_time_ms = int((time.time() - start_time) * 1000)
        tasks = metadata.pop("tasks", None)

        response = {
            "success": True,
            "result": base64.b64encode(output_data).decode("utf-8"),
            "format": f"application/{output_format}",
            "metadata": {str(k): str(v) for k, v in metadata.items()},
            "processing_time_ms": processing_time_ms,
        }
        if tasks is not None:
            response["tasks"] = tasks
        return response

    return app


# Create app instance for uvicorn
app = create_app()


def run_server():
    """Run the HTTP server."""
    import uvicorn
    config = get_config()
    logger.info(f"Starting HTTP server on {config.server.host}:{config.server.port}")
    uvicorn.run(
        "pdfpng.http_server:app",
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
