"""Pre-flight screening of input files before they are parsed."""

from __future__ import annotations

import hashlib
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .exceptions import PDFEditException, UnsafeFileError
from .types import SafetyResult
from .utils import get_logger

LOGGER = get_logger("pdf_edit.safety")

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
PDF_EXTENSIONS = (".pdf",)
GENERATION_EXTENSIONS = (".md", ".markdown", ".txt", ".text")
DEFAULT_BACKUP_DIR = ".pdf-edit-backups"

SCAN_WINDOW = 10_000
SUSPICIOUS_PATTERNS = (
    b"/JavaScript",
    b"/JS",
    b"/Launch",
    b"/URI",
    b"eval(",
    b"unescape(",
    b"fromCharCode(",
)


class SafetyManager:
    """
    Screen files for size, extension, header and suspicious content.

    In generation mode Markdown and text sources are accepted and the PDF
    header check is skipped.
    """

    def __init__(
        self,
        *,
        generation_mode: bool = False,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        allowed_extensions: Optional[Iterable[str]] = None,
        backup_dir: str | Path | None = None,
    ) -> None:
        self.generation_mode = generation_mode
        self.max_file_size = max_file_size
        default_extensions = GENERATION_EXTENSIONS if generation_mode else PDF_EXTENSIONS
        self.allowed_extensions = {ext.lower() for ext in (allowed_extensions or default_extensions)}
        self.backup_dir = Path(backup_dir) if backup_dir else Path.cwd() / DEFAULT_BACKUP_DIR

    def add_allowed_extension(self, extension: str) -> None:
        self.allowed_extensions.add(extension.lower())

    def validate_file(self, file_path: str | Path) -> SafetyResult:
        path = Path(file_path)
        issues = []

        if not path.is_file():
            return SafetyResult(is_safe=False, issues=["File does not exist"])

        extension = path.suffix.lower()
        if extension not in self.allowed_extensions:
            issues.append(f"Unsupported file extension: {extension or '(none)'}")

        try:
            file_size = path.stat().st_size
            if file_size > self.max_file_size:
                issues.append(f"File too large: {file_size} bytes (max: {self.max_file_size})")
                # Avoid reading oversized files into memory.
                return SafetyResult(is_safe=False, issues=issues, file_size=file_size)
            content = path.read_bytes()
        except OSError as exc:
            issues.append(f"Validation error: {exc}")
            return SafetyResult(is_safe=False, issues=issues)

        digest = hashlib.sha256(content).hexdigest()

        if not self.generation_mode and not content.startswith(b"%PDF-"):
            issues.append("Invalid PDF file format")

        head = content[:SCAN_WINDOW]
        found = [pattern.decode() for pattern in SUSPICIOUS_PATTERNS if pattern in head]
        if found:
            LOGGER.warning("Suspicious content in %s: %s", path, ", ".join(found))
            issues.append("Potential security risk detected")

        return SafetyResult(is_safe=not issues, issues=issues, sha256=digest, file_size=file_size)

    def ensure_safe(self, file_path: str | Path) -> SafetyResult:
        """Validate ``file_path`` and raise :class:`UnsafeFileError` if it fails."""

        result = self.validate_file(file_path)
        if not result.is_safe:
            raise UnsafeFileError(
                f"Safety check failed for {file_path}: {'; '.join(result.issues)}",
                issues=result.issues,
            )
        return result

    def create_backup(self, file_path: str | Path) -> Path:
        source = Path(file_path)
        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
        destination = self.backup_dir / f"{timestamp}-{source.name}"
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as exc:
            raise PDFEditException(f"Backup failed: {exc}") from exc
        LOGGER.info("Backed up %s to %s", source, destination)
        return destination


__all__ = ["SafetyManager", "SUSPICIOUS_PATTERNS", "DEFAULT_MAX_FILE_SIZE"]
