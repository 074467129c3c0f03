"""
PkgScout Command-Line Interface

This module provides the CLI entry point for PkgScout. It orchestrates the
full pipeline: discovery -> extraction -> skip list -> rendering -> output.

Usage:
    pkgscout /path/to/setup-scripts
    pkgscout /path/to/setup-scripts --format json --output packages.json
    pkgscout /path/to/setup-scripts --plan
    pkgscout /path/to/setup-scripts --exclude "legacy-*.ps1" --verbose
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from pkgscout import __version__
from pkgscout.catalog import build_catalog
from pkgscout.discovery import discover_scripts
from pkgscout.extractors import ExtractionOptions
from pkgscout.renderer import ReportOptions, render_json, render_plan, render_summary
from pkgscout.skiplist import apply_skip_list


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="pkgscout",
        description=(
            "PkgScout: discover package declarations in PowerShell setup scripts.\n\n"
            "Scans winget, Chocolatey, Scoop, Install-Module and sideload "
            "declarations and reports a deduplicated package catalog."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  pkgscout .                          # Markdown report for current directory\n"
            "  pkgscout scripts --format json      # JSON report\n"
            "  pkgscout scripts --plan             # Print install commands\n"
            "  pkgscout scripts -o report.md       # Write report to a file\n"
        ),
    )

    parser.add_argument(
        "path",
        type=str,
        nargs="?",
        default=".",
        help="Directory containing setup scripts (default: current directory)",
    )

    # Output options
    parser.add_argument(
        "-f", "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Report format (default: markdown)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Write the report to this file instead of stdout",
    )

    parser.add_argument(
        "--plan",
        action="store_true",
        help="Print the install command for each package instead of a report",
    )

    # Discovery options
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Additional script name pattern to exclude (repeatable)",
    )

    parser.add_argument(
        "--no-skip-list",
        action="store_true",
        help="Do not mark CI skip-listed packages as untested",
    )

    # Extraction windows
    parser.add_argument(
        "--iteration-window",
        type=int,
        default=ExtractionOptions.iteration_lookahead,
        metavar="CHARS",
        help="Characters searched after `$Var.Values |` for the consuming installer",
    )

    parser.add_argument(
        "--sideload-window",
        type=int,
        default=ExtractionOptions.sideload_name_lookback,
        metavar="CHARS",
        help="Characters searched before Add-AppxPackage for the app name",
    )

    parser.add_argument(
        "--sideload-url-window",
        type=int,
        default=ExtractionOptions.sideload_url_before,
        metavar="CHARS",
        help="Characters searched on each side of Add-AppxPackage for the download URL",
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed progress information",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors and the report",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log(message: str, quiet: bool = False) -> None:
    """
    Print a progress message to stderr.

    Args:
        message: The message to print
        quiet: If True, suppress the message
    """
    if not quiet:
        print(f"[pkgscout] {message}", file=sys.stderr)


def log_verbose(message: str, verbose: bool, quiet: bool) -> None:
    """Print a message only in verbose mode."""
    if verbose and not quiet:
        print(f"  {message}", file=sys.stderr)


def run_pipeline(
    scripts_path: Path,
    output_path: Optional[Path],
    output_format: str = "markdown",
    plan: bool = False,
    excludes: Optional[list[str]] = None,
    use_skip_list: bool = True,
    extraction_options: Optional[ExtractionOptions] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """
    Run the full PkgScout pipeline.

    Args:
        scripts_path: Directory containing the setup scripts
        output_path: Where to write the report (None = stdout)
        output_format: "markdown" or "json"
        plan: If True, output install commands instead of a report
        excludes: Additional script name patterns to exclude
        use_skip_list: If True, mark CI skip-listed packages as untested
        extraction_options: Windows used by the extractors
        verbose: If True, show detailed progress
        quiet: If True, suppress non-error output

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    # Step 1: Script Discovery
    log(f"Discovering scripts in {scripts_path}...", quiet=quiet)

    try:
        discovery = discover_scripts(scripts_path, extra_excludes=excludes or [])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for script in discovery.scripts:
        log_verbose(str(script), verbose, quiet)

    sources = discovery.load_sources()
    log_verbose(f"{len(sources)} declaration scripts loaded", verbose, quiet)

    # Step 2: Package Extraction
    log("Extracting package declarations...", quiet=quiet)

    catalog = build_catalog(sources, extraction_options)
    warnings = discovery.warnings + catalog.warnings

    if verbose and not quiet:
        for name, _ in sources:
            count = len(catalog.get_packages_by_script(name))
            log_verbose(f"{name}: {count} packages", verbose, quiet)

    for warning in warnings:
        log(f"Warning: {warning}", quiet=quiet)

    # Step 3: Render
    if plan:
        content = render_plan(catalog.packages)
    else:
        if use_skip_list:
            results = apply_skip_list(catalog.packages)
        else:
            results = apply_skip_list(catalog.packages, skip_list={})

        if output_format == "json":
            content = render_json(results, warnings) + "\n"
        else:
            content = render_summary(results, warnings, ReportOptions())

    # Step 4: Output
    if output_path is None:
        sys.stdout.write(content)
    else:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            print(f"Error writing file: {e}", file=sys.stderr)
            return 1
        log(f"Report written to: {output_path}", quiet=quiet)

    log(f"Done. {len(catalog.packages)} packages in {catalog.script_count} scripts.", quiet=quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    extraction_options = ExtractionOptions(
        iteration_lookahead=args.iteration_window,
        sideload_name_lookback=args.sideload_window,
        sideload_url_before=args.sideload_url_window,
        sideload_url_after=args.sideload_url_window,
    )

    return run_pipeline(
        scripts_path=Path(args.path).resolve(),
        output_path=Path(args.output) if args.output else None,
        output_format=args.format,
        plan=args.plan,
        excludes=args.exclude,
        use_skip_list=not args.no_skip_list,
        extraction_options=extraction_options,
        verbose=args.verbose,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    sys.exit(main())
