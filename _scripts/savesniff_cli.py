"""
SaveSniff CLI - Command line interface for dump format detection

Copyright (c) 2025 Brent Lefebure / EhkoLabs

Usage:
    python savesniff_cli.py detect <file>                    - Detect file format
    python savesniff_cli.py detect <file> --json             - Detect, JSON output
    python savesniff_cli.py detect <file> --slots 930 --box-slots 30
                                                             - Allow box dumps for a save geometry
    python savesniff_cli.py detect <file> --generation 4     - Fallback generation for raw entities
    python savesniff_cli.py detect <file> --config cfg.json  - Use a detector config file
    python savesniff_cli.py detect <file> --debug            - Verbose logging
    python savesniff_cli.py detect <file> --json-logs        - Log JSON lines to stderr
    python savesniff_cli.py detect <file> --log-file out.log - Also log JSON lines to a file
    python savesniff_cli.py sizes                            - Show size limits and known sizes
"""

import sys
import json
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from savesniff import (
    ConfigError,
    DetectionKind,
    DetectionResult,
    Detector,
    DetectorConfig,
    ReferenceContext,
)
from savesniff.formats import MEMORY_CARD_SIZES, ENTITY_SIZES
from savesniff.logging_utils import setup_logging, set_trace_id


# =============================================================================
# HELPERS
# =============================================================================

VALUE_OPTIONS = ("--slots", "--box-slots", "--generation", "--config", "--log-file")


def _option(args: list, name: str, cast=int):
    """Value following a --flag, or None if the flag is absent."""
    if name not in args:
        return None
    idx = args.index(name)
    try:
        return cast(args[idx + 1])
    except (IndexError, ValueError):
        raise SystemExit(f"Option {name} needs a value")


def positional(args: list) -> list:
    """Arguments that are neither flags nor the value of a VALUE_OPTIONS flag."""
    files = []
    skip_next = False
    for arg in args:
        if skip_next:
            skip_next = False
        elif arg in VALUE_OPTIONS:
            skip_next = True
        elif not arg.startswith("--"):
            files.append(arg)
    return files


def build_context(args: list):
    """ReferenceContext from --slots/--box-slots/--generation, if any given."""
    slots = _option(args, "--slots")
    box_slots = _option(args, "--box-slots")
    generation = _option(args, "--generation")

    if slots is None and box_slots is None and generation is None:
        return None

    return ReferenceContext(
        slot_count=slots or 0,
        box_slot_count=box_slots or 0,
        generation=generation,
    )


def summarize(result: DetectionResult) -> dict:
    """Flatten a detection result for display."""
    summary = {
        "recognized": result.matched,
        "kind": result.kind.value,
        "recognizer": result.recognizer,
    }

    payload = result.payload
    if result.kind is DetectionKind.ENTITY_LIST:
        summary["count"] = len(payload)
        summary["entity_size"] = len(payload[0]) if payload else 0
    elif payload is not None:
        for attr in ("family", "format", "generation", "blocks"):
            if hasattr(payload, attr):
                summary[attr] = getattr(payload, attr)

    return summary


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_detect(args: list) -> int:
    """Detect a file's format. Exit code 0 if recognized, 1 if not."""
    files = positional(args)

    if not files:
        print("Usage: savesniff_cli.py detect <file> [--json]")
        return 2

    try:
        setup_logging(
            level="DEBUG" if "--debug" in args else "WARNING",
            json_output="--json-logs" in args,
            log_file=_option(args, "--log-file", cast=str),
        )
    except OSError as e:
        print(f"Error: cannot open log file: {e}")
        return 2

    try:
        config_path = _option(args, "--config", cast=Path)
        config = DetectorConfig.load(config_path) if config_path else DetectorConfig()
        detector = Detector(config=config)
    except ConfigError as e:
        print(f"Error: {e.user_message}")
        return 2

    context = build_context(args)
    path = files[0]

    set_trace_id()
    result = detector.detect_from_path(path, context)
    summary = summarize(result)

    if "--json" in args:
        print(json.dumps({"file": path, **summary}, indent=2))
    else:
        print(f"\nFile: {path}")
        print("-" * 50)
        print(f"Recognized: {'Yes' if result else 'No'}")
        if result:
            print(f"Kind: {summary['kind']}")
            print(f"Recognizer: {summary['recognizer']}")
            for key in ("family", "format", "generation", "blocks", "count", "entity_size"):
                if key in summary and summary[key] is not None:
                    print(f"{key.replace('_', ' ').capitalize()}: {summary[key]}")

    return 0 if result else 1


def cmd_sizes() -> int:
    """Show size limits and the sizes the built-in formats accept."""
    config = DetectorConfig()

    print("\nSize gate")
    print("-" * 50)
    print(f"Minimum: {config.min_size:#x} ({config.min_size} bytes)")
    print(f"Maximum: {config.max_size:#x} ({config.max_size} bytes)")
    print(f"Oversize exceptions: {', '.join(f'{s:#x}' for s in config.oversize_exceptions)}")

    print("\nMemory card sizes")
    print("-" * 50)
    for size in sorted(MEMORY_CARD_SIZES):
        print(f"  {size:#x}")

    print("\nEntity sizes")
    print("-" * 50)
    print("  " + ", ".join(str(s) for s in sorted(ENTITY_SIZES)))

    return 0


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        print(__doc__)
        return 1

    cmd = argv[0].lower()

    if cmd == "detect":
        return cmd_detect(argv[1:])
    elif cmd == "sizes":
        return cmd_sizes()

    print(__doc__)
    return 1


if __name__ == "__main__":
    sys.exit(main())
