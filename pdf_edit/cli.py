"""
Command-line interface for PDF Edit.
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeRemainingColumn
from rich.table import Table

from pdf_edit import __version__
from pdf_edit.batch import PARALLEL, SEQUENTIAL, BatchCoordinator
from pdf_edit.document import get_pdf_info, validate_pdf
from pdf_edit.exceptions import PDFEditException
from pdf_edit.generator import ENGINE_DESCRIPTIONS, EngineProbe, GenerationConfig, PdfGenerator
from pdf_edit.modifier import PDFModifier, write_markdown_report
from pdf_edit.parser import OUTPUT_FORMATS, ExtractorConfig, PDFTextExtractor
from pdf_edit.request import (
    build_edit_request,
    image_edit_from_flags,
    parse_fill,
    signature_edit_from_flags,
    text_edit_from_flags,
)
from pdf_edit.safety import SafetyManager
from pdf_edit.templates import catalog
from pdf_edit.utils import format_file_size, set_log_level

console = Console()


def _fail(message) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(message))}")
    sys.exit(1)


def _print_warnings(warnings) -> None:
    for warning in warnings:
        console.print(f"[bold yellow]⚠ Warning:[/bold yellow] {escape(str(warning))}")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    PDF Edit CLI - Stamp, fill, sign and batch-modify PDF files.
    """
    ctx.ensure_object(dict)
    # One engine probe per process, shared by every generation command.
    ctx.obj.setdefault("probe", EngineProbe())
    if verbose:
        set_log_level(logging.DEBUG)


# ----------------------------------------------------------------------
# Modification
# ----------------------------------------------------------------------
def _text_options(func):
    options = [
        click.option('--add-text', help='Text to insert'),
        click.option('--position', help='Text position as x,y (required with --add-text)'),
        click.option('--page', type=int, default=None, help='0-based page index for ad-hoc edits (default 0)'),
        click.option('--font-size', type=float, default=None, help='Font size for inserted text'),
        click.option('--color', help='Text color as r,g,b with components between 0 and 1'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _common_options(func):
    options = [
        click.option('--template', '-t', help='Edit template to apply (see: templates --edit-templates)'),
        click.option('--config', '-c', 'config_path', type=click.Path(), help='JSON file describing edits'),
        click.option('--all-pages', is_flag=True, help='Repeat text, signature and image edits on every page'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _text_edits(add_text, position, page, font_size, color):
    if add_text is None:
        return []
    if not position:
        raise click.UsageError("--add-text requires --position x,y")
    return [text_edit_from_flags(add_text, position, page=page, font_size=font_size, color=color)]


def _show_outcome(outcome) -> None:
    table = Table(title="Modification Results", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Output", str(outcome.output_path))
    table.add_row("Modifications applied", str(outcome.modifications_applied))
    table.add_row("Form fields filled", str(outcome.forms_filled))
    table.add_row("Signatures added", str(outcome.signatures_added))
    table.add_row("Text insertions", str(outcome.text_insertions))
    table.add_row("Image insertions", str(outcome.image_insertions))
    table.add_row("Time", f"{outcome.processing_time:.2f}s")
    console.print(table)
    _print_warnings(f"Skipped {message}" for message in outcome.skipped)


@cli.command(name="modify")
@click.argument('input_pdf', type=click.Path())
@click.argument('output_pdf', type=click.Path())
@_text_options
@click.option('--signature', 'signature_image', type=click.Path(), help='Signature image (PNG or JPEG)')
@click.option('--signature-text', help='Text signature')
@click.option('--signature-box', help='Signature box as x1,y1,x2,y2')
@click.option('--fill', 'fills', multiple=True, help='Form field value as name=value (repeatable)')
@click.option('--add-image', type=click.Path(), help='Image to insert (PNG or JPEG)')
@click.option('--image-box', help='Image box as x1,y1,x2,y2')
@_common_options
@click.option('--report', type=click.Path(), help='Write a Markdown report to this path')
def modify(input_pdf, output_pdf, add_text, position, page, font_size, color, signature_image,
           signature_text, signature_box, fills, add_image, image_box, template, config_path,
           all_pages, report):
    """
    Apply edits to a single PDF file.

    Examples:

        pdf-edit modify in.pdf out.pdf --add-text "APPROVED" --position 450,50

        pdf-edit modify in.pdf out.pdf --fill name="Jane Doe" --fill agree=yes

        pdf-edit modify in.pdf out.pdf --template approval-stamp --signature sig.png --signature-box 400,50,550,100
    """
    try:
        edits = _text_edits(add_text, position, page, font_size, color)

        if signature_image or signature_text:
            if not signature_box:
                raise click.UsageError("--signature/--signature-text requires --signature-box x1,y1,x2,y2")
            edits.append(signature_edit_from_flags(
                signature_box, image_path=signature_image, text=signature_text, page=page, font_size=font_size
            ))

        if add_image:
            if not image_box:
                raise click.UsageError("--add-image requires --image-box x1,y1,x2,y2")
            edits.append(image_edit_from_flags(add_image, image_box, page=page))

        edits.extend(parse_fill(spec) for spec in fills)

        request = build_edit_request(
            single_edits=edits, config_path=config_path, template=template, all_pages=all_pages
        )
    except PDFEditException as e:
        _fail(e)

    _print_warnings(request.warnings)
    if request.edit_set.is_empty:
        console.print("[bold yellow]⚠ Warning:[/bold yellow] No edits requested; the document is copied unchanged")

    with console.status(f"[bold cyan]Modifying {os.path.basename(input_pdf)}...[/bold cyan]"):
        outcome = PDFModifier().apply(input_pdf, output_pdf, request.edit_set)

    if report:
        path = write_markdown_report(outcome, report)
        console.print(f"[dim]Report written to {path}[/dim]")

    if not outcome.success:
        _fail(outcome.error_message)

    console.print(f"\n[bold green]✓ Modified PDF saved to {output_pdf}[/bold green]")
    _show_outcome(outcome)


@cli.command(name="batch-modify")
@click.argument('input_dir', type=click.Path())
@click.argument('output_dir', type=click.Path())
@click.option('--pattern', '-p', default='*.pdf', help='Glob pattern for input files')
@_text_options
@_common_options
@click.option('--preview-only', is_flag=True, help='Show the resolved edits without modifying any file')
@click.option('--parallel', is_flag=True, help='Process all files concurrently')
def batch_modify(input_dir, output_dir, pattern, add_text, position, page, font_size, color,
                 template, config_path, all_pages, preview_only, parallel):
    """
    Apply the same edits to every PDF in a directory.

    Per-file failures are reported in the summary and do not change the
    exit status.

    Examples:

        pdf-edit batch-modify ./in ./out --template confidential-watermark

        pdf-edit batch-modify ./in ./out --config edits.json --parallel
    """
    try:
        request = build_edit_request(
            single_edits=_text_edits(add_text, position, page, font_size, color),
            config_path=config_path,
            template=template,
            all_pages=all_pages,
        )
    except PDFEditException as e:
        _fail(e)

    _print_warnings(request.warnings)
    coordinator = BatchCoordinator()

    try:
        if preview_only:
            report = coordinator.run_batch(input_dir, output_dir, request.edit_set, pattern=pattern, preview_only=True)
            console.print(f"\n[bold cyan]Preview: {len(report.files)} file(s) would be modified[/bold cyan]")
            for file_path in report.files:
                console.print(f"  • {os.path.relpath(file_path, input_dir)}")
            console.print(f"\n{report.preview}")
            return

        files = coordinator.find_files(input_dir, pattern)
        if not files:
            console.print(f"[bold yellow]⚠ Warning:[/bold yellow] No files matching '{pattern}' in {input_dir}")
            return

        strategy = PARALLEL if parallel else SEQUENTIAL
        console.print(f"\n[bold cyan]Modifying {len(files)} file(s) ({strategy})...[/bold cyan]")
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console
        ) as progress:
            task = progress.add_task("Processing files", total=len(files))

            def update_progress(filename, current, total):
                progress.update(task, completed=current, description=f"Processed {filename}")

            report = coordinator.run_batch(
                input_dir, output_dir, request.edit_set,
                pattern=pattern, strategy=strategy, progress_callback=update_progress,
            )
    except (FileNotFoundError, NotADirectoryError) as e:
        _fail(e)

    table = Table(title="Batch Results")
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Edits", justify="right")
    table.add_column("Details", style="dim")
    for outcome in report.outcomes:
        status = "[green]✓ ok[/green]" if outcome.success else "[red]✗ failed[/red]"
        details = outcome.error_message or (f"{len(outcome.skipped)} skipped" if outcome.skipped else "")
        table.add_row(os.path.relpath(outcome.source_path, input_dir), status, str(outcome.modifications_applied), details)
    console.print(table)

    console.print(
        f"\n[bold]Total:[/bold] {report.total}  "
        f"[green]Succeeded: {report.succeeded}[/green]  "
        f"[red]Failed: {report.failed}[/red]  "
        f"Edits applied: {report.total_edits_applied}"
    )


# ----------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------
@cli.command(name="extract")
@click.argument('input_pdf', type=click.Path())
@click.option('--output', '-o', type=click.Path(), help='Output file path (default: stdout)')
@click.option('--format', '-f', 'output_format', type=click.Choice(OUTPUT_FORMATS), default='text')
@click.option('--pages', '-p', help='Pages to extract, e.g. 1,3,5-10')
@click.option('--no-metadata', is_flag=True, help='Skip metadata extraction')
@click.option('--page-info', is_flag=True, help='Include per-page information')
@click.option('--max-pages', type=int, help='Maximum number of pages to process')
@click.option('--password', help='Password for encrypted PDFs')
def extract(input_pdf, output, output_format, pages, no_metadata, page_info, max_pages, password):
    """
    Extract text from a PDF file.

    Example:

        pdf-edit extract report.pdf -f markdown -o report.md
    """
    extractor = PDFTextExtractor(ExtractorConfig(
        extract_metadata=not no_metadata,
        include_page_info=page_info,
        password=password,
        max_pages=max_pages,
    ))

    try:
        if pages:
            content = extractor.extract_pages(input_pdf, pages)
        else:
            result = extractor.parse_file(input_pdf)
            if not result.success:
                _fail("; ".join(result.errors))
            _print_warnings(result.warnings)
            content = extractor.convert_to_format(result.data, output_format)
    except PDFEditException as e:
        _fail(e)

    if output:
        Path(output).write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Extracted content saved to {output}[/bold green]")
    else:
        click.echo(content)


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path())
@click.option('--detailed', is_flag=True, help='Also list form fields')
def show_info(input_pdf, detailed):
    """
    Display information about a PDF file.

    Example:

        pdf-edit info input.pdf
    """
    is_valid, error_msg = validate_pdf(input_pdf)
    if not is_valid:
        _fail(error_msg)

    try:
        info = get_pdf_info(input_pdf)
    except PDFEditException as e:
        _fail(e)

    table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("File", os.path.abspath(input_pdf))
    table.add_row("Pages", str(info.num_pages))
    table.add_row("Size", format_file_size(info.file_size))
    table.add_row("Encrypted", "Yes" if info.is_encrypted else "No")
    for label, value in (("Title", info.title), ("Author", info.author), ("Subject", info.subject),
                         ("Creator", info.creator), ("Producer", info.producer)):
        if value:
            table.add_row(label, value)
    table.add_row("Form fields", str(len(info.form_fields)))
    console.print(table)

    if detailed and info.form_fields:
        console.print("\n[bold]Form fields:[/bold]")
        for name in info.form_fields:
            console.print(f"  • {name}")


@cli.command(name="search")
@click.argument('input_pdf', type=click.Path())
@click.argument('query')
@click.option('--case-sensitive', is_flag=True, help='Match case exactly')
@click.option('--context', 'context_chars', type=int, default=50, help='Characters of context around matches')
def search(input_pdf, query, case_sensitive, context_chars):
    """
    Search a PDF for a regular expression.

    Example:

        pdf-edit search contract.pdf "termination"
    """
    try:
        matches = PDFTextExtractor().search_text(input_pdf, query, case_sensitive, context=context_chars)
    except PDFEditException as e:
        _fail(e)

    if not matches:
        console.print(f"[yellow]No matches for '{query}'[/yellow]")
        return

    console.print(f"[bold green]Found {len(matches)} match(es)[/bold green]\n")
    for match in matches:
        context = " ".join(match.context.split())
        console.print(f"[cyan]Page {match.page}[/cyan]: ...{escape(context)}...", highlight=False)


@cli.command(name="convert")
@click.argument('input_pdf', type=click.Path())
@click.argument('output_file', type=click.Path())
@click.option('--format', '-f', 'output_format', type=click.Choice(OUTPUT_FORMATS), default='markdown')
@click.option('--page-info', is_flag=True, help='Include per-page sections')
@click.option('--password', help='Password for encrypted PDFs')
def convert(input_pdf, output_file, output_format, page_info, password):
    """
    Convert a PDF into text, Markdown, HTML or JSON.

    Example:

        pdf-edit convert manual.pdf manual.html -f html
    """
    extractor = PDFTextExtractor(ExtractorConfig(include_page_info=page_info, password=password))
    result = extractor.parse_file(input_pdf)
    if not result.success:
        _fail("; ".join(result.errors))

    content = extractor.convert_to_format(result.data, output_format)
    Path(output_file).write_text(content, encoding="utf-8")
    console.print(f"[bold green]✓ Converted to {output_format}: {output_file}[/bold green]")


@cli.command(name="validate")
@click.argument('input_file', type=click.Path())
def validate(input_file):
    """
    Run safety checks on a PDF file.

    Example:

        pdf-edit validate upload.pdf
    """
    result = SafetyManager().validate_file(input_file)

    table = Table(title="Safety Validation", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("File", input_file)
    table.add_row("Safe", "[green]Yes[/green]" if result.is_safe else "[red]No[/red]")
    table.add_row("Size", format_file_size(result.file_size))
    if result.sha256:
        table.add_row("SHA-256", result.sha256)
    console.print(table)

    if not result.is_safe:
        for issue in result.issues:
            console.print(f"  [red]•[/red] {issue}")
        sys.exit(1)
    console.print("[bold green]✓ File passed all safety checks[/bold green]")


# ----------------------------------------------------------------------
# Generation
# ----------------------------------------------------------------------
@cli.command(name="generate")
@click.argument('input_file', type=click.Path())
@click.argument('output_pdf', type=click.Path())
@click.option('--template', '-t', default='eisvogel', help='Generation template')
@click.option('--engine', '-e', default='auto', help='PDF engine (auto, xelatex, pdflatex, lualatex, typst)')
@click.option('--font-main', default='Liberation Sans', help='Main font family')
@click.option('--font-code', default='Liberation Mono', help='Code font family')
@click.option('--font-size', type=int, default=11, help='Font size in points')
@click.option('--margins', type=click.Choice(['narrow', 'normal', 'wide']), default='normal')
@click.option('--toc', is_flag=True, help='Include a table of contents')
@click.option('--number-sections', is_flag=True, help='Number sections')
@click.option('--no-highlight', is_flag=True, help='Disable syntax highlighting')
@click.option('--bibliography', type=click.Path(), help='Bibliography file')
@click.option('--color-theme', default='professional', help='Color theme')
@click.pass_context
def generate(ctx, input_file, output_pdf, template, engine, font_main, font_code, font_size, margins,
             toc, number_sections, no_highlight, bibliography, color_theme):
    """
    Generate a PDF from a Markdown or text file.

    Example:

        pdf-edit generate notes.md notes.pdf -t academic --toc
    """
    config = GenerationConfig(
        template=template,
        engine=engine,
        font_main=font_main,
        font_code=font_code,
        font_size=font_size,
        color_theme=color_theme,
        margins=margins,
        include_toc=toc,
        number_sections=number_sections,
        syntax_highlighting=not no_highlight,
        bibliography=bibliography,
    )
    generator = PdfGenerator(ctx.obj["probe"])

    with console.status(f"[bold cyan]Generating {os.path.basename(output_pdf)}...[/bold cyan]"):
        result = generator.generate(input_file, output_pdf, config)

    _print_warnings(result.warnings)
    if not result.success:
        _fail("; ".join(result.errors))

    console.print(f"[bold green]✓ PDF generated: {result.output_path}[/bold green]")
    console.print(f"[dim]Engine: {result.engine_used}  Template: {result.template_used}  "
                  f"Time: {result.generation_time:.2f}s[/dim]")


@cli.command(name="templates")
@click.option('--engines', is_flag=True, help='Show PDF engine availability')
@click.option('--edit-templates', is_flag=True, help='List templates usable with modify/batch-modify')
@click.pass_context
def list_templates(ctx, engines, edit_templates):
    """
    List generation templates, edit templates or PDF engines.
    """
    if edit_templates:
        table = Table(title="Edit Templates")
        table.add_column("Name", style="cyan")
        table.add_column("Description")
        for name in catalog.names():
            table.add_row(name, catalog.get(name).description)
        console.print(table)
        return

    generator = PdfGenerator(ctx.obj["probe"])
    if engines:
        table = Table(title="PDF Engines")
        table.add_column("Engine", style="cyan")
        table.add_column("Available")
        table.add_column("Description")
        for engine, available in generator.engine_info().items():
            table.add_row(engine, "[green]✓[/green]" if available else "[red]✗[/red]", ENGINE_DESCRIPTIONS[engine])
        console.print(table)
        return

    table = Table(title="Generation Templates")
    table.add_column("Name", style="cyan")
    table.add_column("Installed")
    table.add_column("Engines")
    table.add_column("Description")
    for template, installed in generator.list_templates():
        table.add_row(
            template.name,
            "[green]✓[/green]" if installed else "[red]✗[/red]",
            ", ".join(template.engines),
            template.description,
        )
    console.print(table)


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
