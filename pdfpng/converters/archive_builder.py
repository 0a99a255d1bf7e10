"""Bundles artifacts into a single zip archive."""

import io
import zipfile
from typing import Iterable, List, Tuple


class ZipArchiveBuilder:
    """Builds zip archives from ordered (name, bytes) entries."""

    def build(self, entries: Iterable[Tuple[str, bytes]]) -> bytes:
        """
        Write entries into a deflated zip, preserving their order.

        A name seen twice keeps only its first occurrence.
        """
        buffer = io.BytesIO()
        seen = set()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, data in entries:
                if name in seen:
                    continue
                seen.add(name)
                archive.writestr(name, data)
        return buffer.getvalue()

    def read(self, data: bytes) -> List[Tuple[str, bytes]]:
        """Return the file entries of an archive in archive order."""
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile:
            raise ValueError("Invalid or corrupted zip archive")

        with archive:
            return [
                (info.filename, archive.read(info))
                for info in archive.infolist()
                if not info.is_dir()
            ]
