"""Batch application of one :class:`EditSet` to every PDF in a directory."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .backends.base import PDFBackend
from .modifier import PDFModifier
from .types import BatchReport, EditSet, ModificationOutcome
from .utils import get_logger

LOGGER = get_logger("pdf_edit.batch")

SEQUENTIAL = "sequential"
PARALLEL = "parallel"
STRATEGIES = (SEQUENTIAL, PARALLEL)

ProgressCallback = Callable[[str, int, int], None]


class BatchCoordinator:
    """Handle batch modification of multiple PDF files."""

    def __init__(
        self,
        *,
        backend: Optional[PDFBackend] = None,
        modifier: Optional[PDFModifier] = None,
        passwords: Optional[Dict[str, str]] = None,
    ) -> None:
        self.modifier = modifier or PDFModifier(backend=backend)
        self.passwords = passwords or {}

    def find_files(self, input_dir: str, pattern: str = "*.pdf") -> List[str]:
        """Return files in ``input_dir`` matching ``pattern`` with a ``.pdf`` suffix, sorted."""

        input_path = Path(input_dir)
        if not input_path.exists():
            raise FileNotFoundError(f"Directory not found: {input_dir}")
        if not input_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {input_dir}")

        return sorted(
            str(path)
            for path in input_path.glob(pattern or "*.pdf")
            if path.is_file() and path.suffix.lower() == ".pdf"
        )

    def _password_for(self, pdf_path: str) -> Optional[str]:
        return self.passwords.get(Path(pdf_path).name)

    def output_path_for(self, pdf_file: str, input_dir: str, output_dir: str) -> Path:
        """Mirror the location of ``pdf_file`` below ``input_dir`` into ``output_dir``."""
        return Path(output_dir) / Path(pdf_file).relative_to(Path(input_dir))

    def _process_one(self, pdf_file: str, output_path: Path, edit_set: EditSet) -> ModificationOutcome:
        try:
            return self.modifier.apply(
                pdf_file, str(output_path), edit_set, password=self._password_for(pdf_file)
            )
        except Exception as exc:
            LOGGER.exception("Unexpected failure processing %s", pdf_file)
            return ModificationOutcome(success=False, source_path=pdf_file, error_message=str(exc))

    def run_batch(
        self,
        input_dir: str,
        output_dir: str,
        edit_set: EditSet,
        *,
        pattern: str = "*.pdf",
        strategy: str = SEQUENTIAL,
        preview_only: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """
        Apply ``edit_set`` to every matching file of ``input_dir``.

        Each output is written to ``output_dir`` at the path of its source
        relative to ``input_dir``, so files found in subdirectories keep
        distinct outputs.
        Failures are isolated per file and recorded in that file's outcome.
        Outcomes are returned in discovery order whatever the strategy.

        Args:
            input_dir: Directory to scan
            output_dir: Destination directory, created when needed
            edit_set: Edits shared by every file; never mutated
            pattern: Glob pattern, filtered to ``.pdf`` files
            strategy: ``"sequential"`` or ``"parallel"``
            preview_only: Describe the edits without touching any file
            progress_callback: Called with ``(file name, index, total)`` as files complete

        Returns:
            BatchReport with one outcome per discovered file
        """

        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown batch strategy '{strategy}'. Expected one of: {', '.join(STRATEGIES)}")

        pdf_files = self.find_files(input_dir, pattern)

        if preview_only:
            LOGGER.info("Preview only: %d file(s) would be modified", len(pdf_files))
            return BatchReport(files=tuple(pdf_files), preview=edit_set.describe())

        if not pdf_files:
            LOGGER.warning("No files matching '%s' in %s", pattern, input_dir)
            return BatchReport()

        base_output = Path(output_dir)
        base_output.mkdir(parents=True, exist_ok=True)

        targets = {pdf_file: self.output_path_for(pdf_file, input_dir, output_dir) for pdf_file in pdf_files}
        if strategy == PARALLEL:
            outcomes = self._run_parallel(targets, edit_set, progress_callback)
        else:
            outcomes = self._run_sequential(targets, edit_set, progress_callback)

        report = BatchReport(outcomes=tuple(outcomes), files=tuple(pdf_files))
        LOGGER.info("Batch finished: %s", report)
        return report

    def _run_sequential(
        self,
        targets: Dict[str, Path],
        edit_set: EditSet,
        progress_callback: Optional[ProgressCallback],
    ) -> List[ModificationOutcome]:
        outcomes: List[ModificationOutcome] = []
        for index, (pdf_file, output_path) in enumerate(targets.items(), start=1):
            outcomes.append(self._process_one(pdf_file, output_path, edit_set))
            if progress_callback:
                progress_callback(Path(pdf_file).name, index, len(targets))
        return outcomes

    def _run_parallel(
        self,
        targets: Dict[str, Path],
        edit_set: EditSet,
        progress_callback: Optional[ProgressCallback],
    ) -> List[ModificationOutcome]:
        by_file: Dict[str, ModificationOutcome] = {}
        LOGGER.debug("Dispatching %d file(s) in parallel", len(targets))

        with ThreadPoolExecutor(max_workers=len(targets)) as executor:
            futures = {
                executor.submit(self._process_one, pdf_file, output_path, edit_set): pdf_file
                for pdf_file, output_path in targets.items()
            }
            for completed, future in enumerate(as_completed(futures), start=1):
                pdf_file = futures[future]
                by_file[pdf_file] = future.result()
                if progress_callback:
                    progress_callback(Path(pdf_file).name, completed, len(targets))

        return [by_file[pdf_file] for pdf_file in targets]


__all__ = ["BatchCoordinator", "SEQUENTIAL", "PARALLEL", "STRATEGIES"]
