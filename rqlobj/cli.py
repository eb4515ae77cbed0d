from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import typer

from .config import get_settings
from .core.annotations import GeneratorOptions, parse_records
from .core.codegen import generate_source
from .core.errors import SynthesisError
from .core.source import parse_files
from .utils.logging import configure_logging, get_logger

PROG = "rqlobj-gen"

log = get_logger(__name__)

app = typer.Typer(
    help="Generate DBObject accessors for annotated dataclasses.",
    add_completion=False,
)


@app.command()
def generate(
    paths: Optional[List[Path]] = typer.Argument(
        None,
        help="One directory, or .py files of a single package (default: current directory).",
    ),
    tag: Optional[str] = typer.Option(
        None, "--tag", help="Metadata key used to annotate fields (default from settings)."
    ),
    type_names: str = typer.Option(
        "", "--type", help="Comma-separated list of type names; leave blank for all."
    ),
    prefix: str = typer.Option("", "--prefix", help="Only convert types with the given prefix."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file name (default: db_generated.py beside the inputs)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show processing info."),
) -> None:
    """
    Parse annotated dataclasses and write their accessor module.
    """
    settings = get_settings()
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_logs=settings.log_json)

    output_name = output.name if output else settings.output
    directory, files = resolve_inputs(paths or [Path(".")], output_name)
    options = GeneratorOptions(
        tag=tag or settings.tag,
        type_names=tuple(name.strip() for name in type_names.split(",") if name.strip()),
        prefix=prefix,
    )

    try:
        decls = parse_files(files)
    except (OSError, SyntaxError, UnicodeDecodeError) as exc:
        log.error("parsing package: %s", exc)
        raise typer.Exit(code=1)

    schemas = parse_records(decls, options)
    if not schemas:
        log.warning("no types annotated with %r found", options.tag)

    modules = {decl.name: decl.module for decl in decls}
    imports: Dict[str, List[str]] = {}
    for schema in schemas:
        module = modules.get(schema.name)
        if module:
            imports.setdefault(module, []).append(schema.name)

    out = output if output else directory / settings.output
    relative = (directory / "__init__.py").exists() and out.resolve().parent == directory.resolve()

    try:
        src = generate_source(
            schemas,
            command=_command_line(paths, tag, type_names, prefix, output, verbose),
            imports=imports,
            relative=relative,
        )
    except SynthesisError as exc:
        log.error("generating accessors: %s", exc)
        raise typer.Exit(code=1)

    try:
        out.write_text(src, encoding="utf-8")
    except OSError as exc:
        log.error("writing output: %s", exc)
        raise typer.Exit(code=1)
    log.info("wrote %s with %d type(s)", out, len(schemas))


def resolve_inputs(paths: Sequence[Path], output_name: str) -> Tuple[Path, List[Path]]:
    """Resolve CLI paths to one package directory and its source files."""

    if len(paths) == 1 and paths[0].is_dir():
        directory = paths[0]
        files = sorted(
            p for p in directory.glob("*.py") if p.name != output_name and not _is_generated(p)
        )
    else:
        for path in paths:
            if path.suffix != ".py" or not path.is_file():
                raise typer.BadParameter(f"{path} is not a Python source file", param_hint="PATHS")
        parents = {path.resolve().parent for path in paths}
        if len(parents) != 1:
            raise typer.BadParameter("files must belong to a single package", param_hint="PATHS")
        directory = paths[0].parent
        files = list(paths)

    if not files:
        log.error("%s: no Python source files", directory)
        raise typer.Exit(code=1)
    return directory, files


def _is_generated(path: Path) -> bool:
    with path.open(encoding="utf-8", errors="replace") as fh:
        return fh.readline().startswith("# generated by ")


def _command_line(
    paths: Optional[Sequence[Path]],
    tag: Optional[str],
    type_names: str,
    prefix: str,
    output: Optional[Path],
    verbose: bool,
) -> str:
    args = [PROG]
    if tag:
        args += ["--tag", tag]
    if type_names:
        args += ["--type", type_names]
    if prefix:
        args += ["--prefix", prefix]
    if output:
        args += ["--output", str(output)]
    if verbose:
        args.append("--verbose")
    args += [str(path) for path in paths or ()]
    return shlex.join(args)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
