"""Configuration management for the PDF page conversion service."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class RenderConfig:
    """Configuration for PDF page rendering."""
    scale: float = field(
        default_factory=lambda: float(os.environ.get("RENDER_SCALE", "2.0"))
    )
    image_format: str = field(
        default_factory=lambda: os.environ.get("RENDER_IMAGE_FORMAT", "png")
    )
    max_file_size_mb: int = field(
        default_factory=lambda: int(os.environ.get("MAX_FILE_SIZE_MB", "100"))
    )


@dataclass
class MergeConfig:
    """Page canvas used when merging images into a PDF (A4, in points)."""
    page_width: float = field(
        default_factory=lambda: float(os.environ.get("MERGE_PAGE_WIDTH", "595.28"))
    )
    page_height: float = field(
        default_factory=lambda: float(os.environ.get("MERGE_PAGE_HEIGHT", "841.89"))
    )


@dataclass
class SaveConfig:
    """Configuration for artifact sinks and the save endpoint."""
    output_dir: str = field(
        default_factory=lambda: os.environ.get("SAVE_OUTPUT_DIR", "pdf_output")
    )
    upload_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SAVE_UPLOAD_TIMEOUT", "30"))
    )
    # Comma-separated URL prefixes clients may upload to; empty allows any
    allowed_upload_urls: str = field(
        default_factory=lambda: os.environ.get("SAVE_URL_ALLOWLIST", "")
    )
    # Directory client-chosen output dirs must stay inside; empty allows any
    output_root: str = field(
        default_factory=lambda: os.environ.get("SAVE_OUTPUT_ROOT", "")
    )


@dataclass
class ServerConfig:
    """Configuration for HTTP server."""
    host: str = field(
        default_factory=lambda: os.environ.get("HTTP_HOST", "0.0.0.0")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("HTTP_PORT", "8089"))
    )


@dataclass
class Config:
    """Main configuration container."""
    render: RenderConfig = field(default_factory=RenderConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)
    save: SaveConfig = field(default_factory=SaveConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration from environment."""
    global _config
    _config = Config()
    return _config
