"""
LogicGraph CLI - Command-line interface for region extraction.

Usage:
    logicgraph extract [options]            Run region extraction
    logicgraph normalize <logic> [options]  Print the DNF clauses of logic text
    logicgraph validate <world_file>        Validate a world definition
"""

import argparse
import logging
import sys

from pydantic import ValidationError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="LogicGraph - Region graph extraction from game logic",
        prog="logicgraph",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Run region extraction")
    source = extract_parser.add_mutually_exclusive_group()
    source.add_argument("--world-definition", help="Normalized world definition JSON")
    source.add_argument("--rando-context", help="Saved randomizer context JSON")
    extract_parser.add_argument("--raw-logic-dir", help="Directory of raw logic files")
    extract_parser.add_argument("--ref", help="Subdirectory of the raw logic directory")
    extract_parser.add_argument("--start-state-term", help="Term whose region becomes Menu")
    extract_parser.add_argument("--empty-regions-to-keep", help="JSON array of regions to keep")
    extract_parser.add_argument("--jobs", nargs="*", help="Requested jobs")
    extract_parser.add_argument("--output", "-o", default="output", help="Output directory")
    extract_parser.add_argument(
        "--variable-resolver",
        choices=["dummy", "strict"],
        help="How $ state calls are resolved (default: dummy)",
    )

    # Normalize command
    normalize_parser = subparsers.add_parser("normalize", help="Print DNF clauses of logic text")
    normalize_parser.add_argument("logic", help="Logic text, e.g. 'Town + (Dash | Claw)'")
    normalize_parser.add_argument("--terms", help="terms.json file")
    normalize_parser.add_argument("--macros", help="macros.json file")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a world definition")
    validate_parser.add_argument("world_file", help="Path to world definition JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "extract":
        cmd_extract(args)
    elif args.command == "normalize":
        cmd_normalize(args)
    elif args.command == "validate":
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def cmd_extract(args):
    """Run region extraction."""
    from .config import ExtractorOptions
    from .extractor import RegionExtractor
    from .logic.errors import LogicGraphError

    try:
        options = ExtractorOptions.from_env(
            world_definition_path=args.world_definition,
            rando_context_path=args.rando_context,
            raw_logic_dir=args.raw_logic_dir,
            ref_name=args.ref,
            start_state_term=args.start_state_term,
            empty_regions_to_keep_path=args.empty_regions_to_keep,
            jobs=args.jobs,
            output_dir=args.output,
            variable_resolver=args.variable_resolver,
        )
    except ValidationError as e:
        _fail(str(e))

    try:
        report = RegionExtractor(options).run()
    except (LogicGraphError, FileNotFoundError) as e:
        _fail(str(e))

    if report is None:
        print("Region extraction not requested")
        return
    for path in report.outputs:
        print(f"Wrote {path}")


def cmd_normalize(args):
    """Print the DNF clauses of logic text."""
    from .extractor.loader import read_json
    from .logic import DNFNormalizer, LogicGraphError, LogicPreprocessor, TermRegistry

    try:
        terms = TermRegistry()
        if args.terms:
            terms = TermRegistry.from_mapping(read_json(args.terms))
        preprocessor = LogicPreprocessor(terms=terms)
        if args.macros:
            preprocessor.set_macros(read_json(args.macros))
        expression = preprocessor.compile_text("<input>", args.logic)
        clauses = DNFNormalizer(terms=terms).normalize("<input>", expression)
    except (LogicGraphError, FileNotFoundError) as e:
        _fail(str(e))

    for clause in clauses:
        provider = f" [from {clause.state_provider}]" if clause.state_provider else ""
        print(f"{clause}{provider}")


def cmd_validate(args):
    """Validate a world definition."""
    from .extractor import WorldDefinitionSource
    from .graph import validate_world_definition
    from .logic.errors import LogicGraphError

    print(f"Validating: {args.world_file}")
    source = WorldDefinitionSource(args.world_file)
    try:
        source.load()
        result = validate_world_definition(source.to_definitions())
    except (LogicGraphError, FileNotFoundError) as e:
        _fail(str(e))

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("World definition is valid")


if __name__ == "__main__":
    main()
