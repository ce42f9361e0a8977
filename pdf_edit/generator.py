"""PDF generation from Markdown/text through external engines (pandoc, LaTeX, typst)."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import GenerationError
from .safety import SafetyManager
from .types import GenerationResult
from .utils import get_logger

LOGGER = get_logger("pdf_edit.generator")

FALLBACK_ENGINES: Tuple[str, ...] = ("xelatex", "pdflatex", "lualatex", "typst")
ENGINE_DESCRIPTIONS: Dict[str, str] = {
    "xelatex": "Modern LaTeX engine with excellent Unicode and font support",
    "pdflatex": "Traditional LaTeX engine, fast and reliable for basic documents",
    "lualatex": "Lua-powered LaTeX engine with advanced scripting capabilities",
    "typst": "Modern typesetting system, fast compilation and clean syntax",
}

MARGINS = {"narrow": "0.5in", "normal": "1in", "wide": "1.25in"}
PANDOC_TIMEOUT = 300
TYPST_TIMEOUT = 60
DEFAULT_TEMPLATE = "academic"


class EngineProbe:
    """
    Remember which external executables are on ``PATH``.

    Each engine is looked up the first time it is asked for and the answer
    is kept for the lifetime of the probe. Create one per process and pass
    it to every :class:`PdfGenerator`.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    def locate(self, engine: str) -> Optional[str]:
        with self._lock:
            if engine not in self._cache:
                found = shutil.which(engine)
                LOGGER.debug("Probed engine %s -> %s", engine, found or "not found")
                self._cache[engine] = found
            return self._cache[engine]

    def is_available(self, engine: str) -> bool:
        return self.locate(engine) is not None

    def probed(self) -> Dict[str, bool]:
        with self._lock:
            return {engine: path is not None for engine, path in self._cache.items()}


@dataclass(frozen=True)
class GenerationTemplate:
    name: str
    title: str
    engines: Tuple[str, ...]
    preferred_engine: str
    description: str
    builtin: bool = True


GENERATION_TEMPLATES: Dict[str, GenerationTemplate] = {
    template.name: template
    for template in (
        GenerationTemplate(
            "eisvogel",
            "Eisvogel LaTeX Template",
            ("xelatex", "lualatex", "pdflatex"),
            "xelatex",
            "Professional LaTeX template with modern typography, ideal for technical documents",
            builtin=False,
        ),
        GenerationTemplate(
            "typst-modern",
            "Modern Typst Template",
            ("typst",),
            "typst",
            "Clean, modern template using Typst engine for fast compilation",
        ),
        GenerationTemplate(
            "academic",
            "Academic Paper Template",
            ("xelatex", "pdflatex"),
            "xelatex",
            "Traditional academic paper format with proper citations and structure",
        ),
        GenerationTemplate(
            "corporate",
            "Corporate Document Template",
            ("xelatex", "lualatex"),
            "xelatex",
            "Business-focused template with professional styling and branding",
        ),
        GenerationTemplate(
            "technical",
            "Technical Documentation Template",
            ("xelatex", "lualatex"),
            "xelatex",
            "Code-heavy documentation template with excellent syntax highlighting",
        ),
    )
}


@dataclass
class GenerationConfig:
    template: str = "eisvogel"
    engine: str = "auto"
    font_main: str = "Liberation Sans"
    font_code: str = "Liberation Mono"
    font_size: int = 11
    color_theme: str = "professional"
    margins: str = "normal"
    include_toc: bool = False
    number_sections: bool = False
    syntax_highlighting: bool = True
    bibliography: Optional[str] = None


def pandoc_templates_dir() -> Path:
    return Path.home() / ".local" / "share" / "pandoc" / "templates"


def build_pandoc_command(
    input_path: Path, output_path: Path, config: GenerationConfig, engine: str
) -> List[str]:
    """Construct the pandoc command for ``engine``."""

    command = ["pandoc", str(input_path), "-o", str(output_path), f"--pdf-engine={engine}"]
    if config.template == "eisvogel":
        command += ["--template", "eisvogel"]

    command += [
        "--variable", f"fontsize={config.font_size}pt",
        "--variable", f"mainfont={config.font_main}",
        "--variable", f"monofont={config.font_code}",
        "--variable", f"geometry:margin={MARGINS.get(config.margins, MARGINS['normal'])}",
    ]

    if config.include_toc:
        command.append("--toc")
    if config.number_sections:
        command.append("--number-sections")
    if config.syntax_highlighting:
        command += ["--highlight-style", "pygments"]
    if config.bibliography:
        command += ["--bibliography", config.bibliography]
    if config.template == "eisvogel" and config.color_theme == "corporate":
        command += [
            "--variable", "titlepage=true",
            "--variable", "colorlinks=true",
            "--variable", "linkcolor=blue",
        ]
    return command


def markdown_to_typst(content: str, config: GenerationConfig) -> str:
    """Very small Markdown to Typst conversion: headings and fenced code."""

    lines = [
        f'#set text(font: "{config.font_main}", size: {config.font_size}pt)',
        f'#set raw(font: "{config.font_code}")',
        "#set page(margin: 1in)",
        "",
    ]
    if config.include_toc:
        lines += ["#outline()", ""]

    in_code = False
    for line in content.splitlines():
        if line.strip().startswith("```"):
            in_code = not in_code
            lines.append("```")
        elif not in_code and line.startswith("### "):
            lines.append(f"=== {line[4:]}")
        elif not in_code and line.startswith("## "):
            lines.append(f"== {line[3:]}")
        elif not in_code and line.startswith("# "):
            lines.append(f"= {line[2:]}")
        else:
            lines.append(line)
    return "\n".join(lines) + "\n"


class PdfGenerator:
    """Generate PDFs from Markdown or plain text sources."""

    def __init__(
        self,
        probe: Optional[EngineProbe] = None,
        *,
        safety_manager: Optional[SafetyManager] = None,
        templates_dir: Optional[Path] = None,
    ) -> None:
        self.probe = probe or EngineProbe()
        self.safety_manager = safety_manager or SafetyManager(generation_mode=True)
        self.templates_dir = templates_dir or pandoc_templates_dir()

    # ------------------------------------------------------------------
    # Templates and engines
    # ------------------------------------------------------------------
    def is_template_installed(self, name: str) -> bool:
        if name == "eisvogel":
            return (self.templates_dir / "eisvogel.latex").is_file()
        if name.startswith("typst-"):
            return self.probe.is_available("typst")
        return name in GENERATION_TEMPLATES

    def list_templates(self) -> List[Tuple[GenerationTemplate, bool]]:
        return [(template, self.is_template_installed(name)) for name, template in GENERATION_TEMPLATES.items()]

    def engine_info(self) -> Dict[str, bool]:
        return {engine: self.probe.is_available(engine) for engine in FALLBACK_ENGINES}

    def select_engine(self, config: GenerationConfig) -> Optional[str]:
        if config.engine != "auto":
            if self.probe.is_available(config.engine):
                return config.engine
            LOGGER.warning("Requested engine '%s' is not available", config.engine)

        template = GENERATION_TEMPLATES.get(config.template)
        preferred: Sequence[str] = template.engines if template else ("xelatex", "pdflatex", "typst")
        for engine in list(preferred) + list(FALLBACK_ENGINES):
            if self.probe.is_available(engine):
                return engine
        return None

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(
        self, input_path: str | Path, output_path: str | Path, config: Optional[GenerationConfig] = None
    ) -> GenerationResult:
        start_time = time.perf_counter()
        config = replace(config) if config else GenerationConfig()
        result = GenerationResult()
        source = Path(input_path)
        destination = Path(output_path)

        safety = self.safety_manager.validate_file(source)
        if not safety.is_safe:
            result.errors.extend(safety.issues)
            return result

        if not self.is_template_installed(config.template):
            message = f"Template '{config.template}' not installed, using {DEFAULT_TEMPLATE}"
            LOGGER.warning(message)
            result.warnings.append(message)
            config.template = DEFAULT_TEMPLATE

        engine = self.select_engine(config)
        if engine is None:
            result.errors.append("No suitable PDF engine found")
            return result

        result.engine_used = engine
        result.template_used = config.template
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if engine == "typst":
                self._run_typst(source, destination, config)
            else:
                self._run(build_pandoc_command(source, destination, config, engine), PANDOC_TIMEOUT)
        except GenerationError as exc:
            LOGGER.error("Generation with %s failed: %s", engine, exc.message)
            result.errors.append(exc.message)
            result.generation_time = time.perf_counter() - start_time
            return result

        result.success = True
        result.output_path = str(destination)
        result.generation_time = time.perf_counter() - start_time
        LOGGER.info("Generated %s with %s in %.2fs", destination, engine, result.generation_time)
        return result

    def _run_typst(self, source: Path, destination: Path, config: GenerationConfig) -> None:
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise GenerationError(f"Unable to read {source}: {exc}") from exc

        with tempfile.TemporaryDirectory() as workdir:
            typ_path = Path(workdir) / f"{source.stem}.typ"
            typ_path.write_text(markdown_to_typst(content, config), encoding="utf-8")
            self._run(["typst", "compile", str(typ_path), str(destination)], TYPST_TIMEOUT)

    @staticmethod
    def _run(command: List[str], timeout: int) -> None:
        LOGGER.debug("Executing command: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GenerationError(f"Failed to run {command[0]}: {exc}") from exc

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise GenerationError(f"{command[0]} exited with status {completed.returncode}: {detail}")


__all__ = [
    "EngineProbe",
    "GenerationConfig",
    "GenerationTemplate",
    "GENERATION_TEMPLATES",
    "PdfGenerator",
    "build_pandoc_command",
    "markdown_to_typst",
]
