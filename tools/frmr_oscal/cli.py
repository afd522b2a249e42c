#!/usr/bin/env python3
"""
frmr-oscal CLI - FedRAMP FRMR to OSCAL converter

Reads FRMR.documentation.json and writes an OSCAL 1.2.0 catalog and a KSI to
NIST SP 800-53 mapping collection, optionally validating both with NIST oscal-cli.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .cir import FRMRSource, SourceValidator
from .mappers import CatalogMapper, GlossaryIndex, MappingMapper
from .readers import FRMRReader
from .validation import OSCALValidator

DEFAULT_CATALOG_NAME = "fedramp-frmr-catalog.json"
DEFAULT_MAPPING_NAME = "fedramp-ksi-nist-mapping.json"

# Set up console and logging
console = Console()
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, show_time=False, show_path=False)]
)
logger = logging.getLogger("frmr_oscal")


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """frmr-oscal - convert FedRAMP FRMR data to OSCAL catalog and mapping collection"""
    ctx.ensure_object(dict)

    if quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(file_okay=False, path_type=Path),
              default=Path('dist/oscal'), help='Output directory for OSCAL artifacts')
@click.option('--catalog-name', default=DEFAULT_CATALOG_NAME, show_default=True,
              help='File name of the OSCAL catalog')
@click.option('--mapping-name', default=DEFAULT_MAPPING_NAME, show_default=True,
              help='File name of the OSCAL mapping collection')
@click.option('--oscal-cli-path', default='oscal-cli', help='Path to oscal-cli executable')
@click.option('--skip-oscal-cli', is_flag=True, help='Do not run oscal-cli validation')
@click.pass_context
def build(ctx, source: Path, output: Path, catalog_name: str, mapping_name: str,
          oscal_cli_path: str, skip_oscal_cli: bool):
    """Build OSCAL catalog and mapping collection from an FRMR source file"""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=ctx.obj['quiet']
    ) as progress:

        # Phase 1: Read source
        task = progress.add_task("Reading FRMR source...", total=None)
        data = _read_source(ctx, source)

        # Phase 2: Validate source structure
        progress.update(task, description="Validating source data...")
        violations = SourceValidator().validate(data)
        if violations:
            _report_violations(violations)
            sys.exit(1)

        try:
            frmr = FRMRReader.to_source(data)
        except ValueError as e:
            logger.error(f"Source validation failed: {e}")
            sys.exit(1)

        logger.info(f"Source validated: {frmr.requirement_count} requirements, "
                    f"{len(frmr.domains)} KSI domains")

        # Phase 3: Map to OSCAL
        progress.update(task, description="Mapping to OSCAL...")
        try:
            catalog, mapping = build_artifacts(frmr, catalog_name)
        except ValueError as e:
            logger.error(f"Catalog build failed: {e}")
            sys.exit(1)

        # Phase 4: Write OSCAL outputs
        progress.update(task, description="Writing OSCAL artifacts...")
        catalog_path = output / catalog_name
        mapping_path = output / mapping_name
        try:
            write_artifacts([(catalog_path, catalog), (mapping_path, mapping)])
        except OSError as e:
            logger.error(f"Failed to write OSCAL artifacts to {output}: {e}")
            sys.exit(1)

    if not ctx.obj['quiet']:
        console.print(_summary_table(catalog, mapping))

    logger.info(f"OSCAL build completed. Outputs in: {output}")

    if not skip_oscal_cli:
        _run_oscal_cli(oscal_cli_path, [catalog_path, mapping_path])


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def check(ctx, source: Path):
    """Check an FRMR source file for structural problems"""
    data = _read_source(ctx, source)

    violations = SourceValidator().validate(data)
    if violations:
        _report_violations(violations)
        sys.exit(1)

    frmr = FRMRReader.to_source(data)
    logger.info(f"Source is valid: {frmr.requirement_count} requirements, "
                f"{frmr.indicator_count} indicators, {len(frmr.glossary)} terms")


@cli.command()
@click.option('--check-deps', is_flag=True, help='Check required dependencies')
@click.option('--check-oscal-cli', is_flag=True, help='Check NIST oscal-cli availability')
@click.option('--oscal-cli-path', default='oscal-cli', help='Path to oscal-cli executable')
def doctor(check_deps: bool, check_oscal_cli: bool, oscal_cli_path: str):
    """Diagnostic tool for frmr-oscal installation"""
    if check_deps or not (check_deps or check_oscal_cli):
        _check_python_deps()

    if check_oscal_cli or not (check_deps or check_oscal_cli):
        try:
            OSCALValidator(oscal_cli_path)
        except RuntimeError as e:
            logger.error(str(e))


def build_artifacts(frmr: FRMRSource, catalog_name: str = DEFAULT_CATALOG_NAME,
                    timestamp: Optional[str] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Build the catalog and mapping collection sharing one timestamp"""
    index = GlossaryIndex.build(frmr.glossary)
    catalog_mapper = CatalogMapper(glossary_index=index, timestamp=timestamp)
    mapping_mapper = MappingMapper(catalog_filename=catalog_name, timestamp=catalog_mapper.timestamp)
    return catalog_mapper.map(frmr), mapping_mapper.map(frmr)


def write_artifacts(artifacts: List[Tuple[Path, Dict[str, Any]]]) -> None:
    """Write all artifacts or none of them"""
    payloads = [(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
                for path, data in artifacts]

    # Stage every payload beside its target; nothing is renamed into place
    # until all of them are fully on disk
    staged = []
    replaced = []
    try:
        for path, payload in payloads:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(f".{path.name}.tmp")
            staged.append(tmp_path)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(payload)

        for tmp_path, (path, _) in zip(staged, payloads):
            os.replace(tmp_path, path)
            replaced.append(path)
            logger.info(f"Generated: {path}")
    except OSError:
        for path in staged + replaced:
            path.unlink(missing_ok=True)
        raise


def _read_source(ctx, source: Path) -> Dict[str, Any]:
    try:
        reader = FRMRReader(source)
        data = reader.read()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to read {source}: {e}")
        if ctx.obj['verbose']:
            logger.exception(e)
        sys.exit(1)

    logger.debug(f"Source: {reader.describe()}")
    return data


def _report_violations(violations: List[str]) -> None:
    logger.error("Source validation failed:")
    for violation in violations:
        logger.error(f"  - {violation}")


def _count_controls(groups: List[Dict[str, Any]]) -> int:
    total = 0
    for group in groups:
        total += len(group.get("controls", []))
        total += _count_controls(group.get("groups", []))
    return total


def _summary_table(catalog: Dict[str, Any], mapping: Dict[str, Any]) -> Table:
    content = catalog["catalog"]
    maps = mapping["mapping-collection"]["mappings"][0]["maps"]

    table = Table(title="OSCAL build summary")
    table.add_column("Artifact")
    table.add_column("Item")
    table.add_column("Count", justify="right")
    table.add_row("catalog", "groups", str(len(content["groups"])))
    table.add_row("catalog", "controls", str(_count_controls(content["groups"])))
    table.add_row("catalog", "back-matter resources", str(len(content["back-matter"]["resources"])))
    table.add_row("mapping-collection", "KSI→NIST map entries", str(len(maps)))
    return table


def _run_oscal_cli(oscal_cli_path: str, paths: List[Path]) -> None:
    """Advisory oscal-cli validation; failures are reported, not fatal"""
    try:
        validator = OSCALValidator(oscal_cli_path)
    except RuntimeError as e:
        logger.info(f"Skipping schema validation: {e}")
        return

    for path in paths:
        result = validator.validate_file(path)
        if result["valid"]:
            logger.info(f"{path.name} validation: PASSED")
        else:
            logger.warning(f"{path.name} validation: FAILED")
            for error in result["errors"]:
                logger.warning(f"  {error}")


def _check_python_deps():
    """Check Python dependencies"""
    required = ['jsonschema', 'click', 'rich']
    missing = []

    for pkg in required:
        try:
            __import__(pkg)
        except ImportError:
            missing.append(pkg)

    if missing:
        logger.error(f"Missing Python dependencies: {', '.join(missing)}")
        logger.info("Run: pip install -e .")
    else:
        logger.info("All Python dependencies satisfied")


if __name__ == '__main__':
    cli()
