"""CLI entry point for Metrika health tracking."""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from . import __version__
from .cache import HealthDataCache
from .config import ConfigurationError, MetrikaSettings, get_settings
from .exceptions import (
    HealthStoreError,
    MetrikaException,
    NormalizationError,
    UnsupportedFormatError,
)
from .extractors.weight import WeightTokenExtractor
from .health import HealthManager
from .logging import HealthLogger, configure_logging
from .models.weight import Weight
from .normalizers.numbers import NumberNormalizer
from .output.csv_writer import CSVWriter
from .output.json_writer import JSONWriter
from .recognition import FileImageSource, ScanStatus, TesseractRecognizer, WeightScanner
from .reports import ReportBuilder
from .store.json_store import JsonHealthStore

CONFIRM_ANSWERS = ("s", "sim", "y", "yes")
SUPPORTED_FORMATS = ["json", "csv"]


def setup_logging(settings: MetrikaSettings, verbose: bool = False, log_format: str = None) -> None:
    """Route structlog output to stderr; DEBUG when verbose, else the configured level."""
    level = "DEBUG" if verbose else settings.log_level
    fmt = log_format or settings.log_format
    configure_logging(log_level=level, log_format=fmt)


def positive_int(value: str) -> int:
    """argparse type for day counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="metrika",
        description="Track body weight, water intake and workouts",
        epilog="Example: metrika scan balanca.jpg",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=None,
        help="Log line format on stderr (default from METRIKA_LOG_FORMAT)",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Health data JSON file (default: ~/.metrika/health.json)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    extract = commands.add_parser("extract", help="Find a weight in recognized text lines")
    extract.add_argument("lines", nargs="*", help="Recognized lines, in order")
    extract.add_argument(
        "--check-plausibility",
        action="store_true",
        help="Reject weights outside 20-300 kg",
    )

    scan = commands.add_parser("scan", help="Read a weight from a photo of a scale")
    scan.add_argument("image", help="Image file")
    scan.add_argument("--yes", action="store_true", help="Save without asking for confirmation")
    scan.add_argument(
        "--check-plausibility",
        action="store_true",
        help="Reject weights outside 20-300 kg",
    )

    weight = commands.add_parser("weight", help="Record or show body weight")
    weight_commands = weight.add_subparsers(dest="weight_command", required=True)
    weight_add = weight_commands.add_parser("add", help="Save a weight in kg")
    weight_add.add_argument("kg", help="Weight in kg, e.g. 72,5")
    weight_commands.add_parser("latest", help="Show the latest recorded weight")

    water = commands.add_parser("water", help="Record water intake")
    water_commands = water.add_subparsers(dest="water_command", required=True)
    water_add = water_commands.add_parser("add", help="Add a water intake")
    amount = water_add.add_mutually_exclusive_group(required=True)
    amount.add_argument("--ml", type=str, help="Custom amount in mL")
    amount.add_argument(
        "--preset",
        choices=sorted(NumberNormalizer.WATER_PRESETS_ML),
        help="Preset amount: cup (250 mL) or bottle (750 mL)",
    )

    summary = commands.add_parser("summary", help="Show today's summary cards")
    summary.add_argument("--json", action="store_true", help="Print JSON instead of text")

    report = commands.add_parser("report", help="Export weight and water history")
    report.add_argument(
        "-o",
        "--output",
        type=str,
        help="Write the report to this file (.json or .csv) instead of stdout",
    )
    report.add_argument(
        "-f",
        "--format",
        choices=SUPPORTED_FORMATS,
        help="Force the report format regardless of the file extension",
    )
    report.add_argument("--days", type=positive_int, default=None, help="Days of history (default: 30)")

    activity = commands.add_parser("activity", help="Show exercise and recent workouts")
    activity.add_argument("--days", type=positive_int, default=None, help="Days of workouts (default: 7)")
    activity.add_argument("--json", action="store_true", help="Print JSON instead of text")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def determine_output_format(output_path: Optional[str], format_override: Optional[str]) -> str:
    """Explicit format first, then the file extension, then JSON."""
    if format_override:
        return format_override

    if output_path:
        suffix = Path(output_path).suffix.lower()
        if suffix == ".csv":
            return "csv"
        if suffix not in ("", ".json"):
            raise UnsupportedFormatError(suffix.lstrip("."), SUPPORTED_FORMATS)
    return "json"


def prompt_confirmation(token: str) -> bool:
    """Ask on the terminal whether a detected weight should be saved."""
    try:
        answer = input(f"Peso detetado: {token} kg. Guardar? [s/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in CONFIRM_ANSWERS


# =============================================================================
# Commands
# =============================================================================


def cmd_extract(args, settings: MetrikaSettings, logger: HealthLogger) -> int:
    token, index = WeightTokenExtractor().extract_with_index(args.lines)
    if token is None:
        logger.weight_not_found(line_count=len(args.lines))
        return 1
    if args.check_plausibility and not Weight.from_string(token).is_plausible():
        logger.warning("weight_implausible", value=token)
        return 1
    logger.weight_detected(value=token, line_index=index)
    print(token)
    return 0


def cmd_scan(args, cache: HealthDataCache, settings: MetrikaSettings, logger: HealthLogger) -> int:
    scanner = WeightScanner(
        TesseractRecognizer(lang=settings.ocr_lang),
        check_plausibility=args.check_plausibility,
    )
    confirm: Callable[[str], bool] = (lambda token: True) if args.yes else prompt_confirmation
    result = scanner.scan_and_save(FileImageSource(args.image), confirm, cache)

    logger.info("scan_finished", status=result.status.value, weight=result.weight_text)
    if result.status is ScanStatus.SAVED:
        print(f"{result.weight_text} kg")
        return 0
    return 1


def cmd_weight(args, cache: HealthDataCache, logger: HealthLogger) -> int:
    builder = ReportBuilder(cache.manager)
    if args.weight_command == "add":
        try:
            weight = Weight.from_string(args.kg)
        except NormalizationError as e:
            logger.error("invalid_weight", input=args.kg, error=e.message)
            return 1
        if not weight.is_positive():
            logger.error("invalid_weight", input=args.kg, error="weight must be positive")
            return 1
        if not cache.record_weight(float(weight.kg)):
            return 1

    card = builder.weight_card()
    print(f"{card.value_text} kg")
    print(card.date_text)
    return 0


def cmd_water(args, cache: HealthDataCache, settings: MetrikaSettings, logger: HealthLogger) -> int:
    try:
        if args.preset:
            liters = NumberNormalizer.preset_liters(args.preset)
        else:
            liters = NumberNormalizer.milliliters_to_liters(args.ml)
    except NormalizationError as e:
        logger.error("invalid_volume", error=e.message)
        return 1

    if not cache.record_water(liters):
        return 1

    card = ReportBuilder(cache.manager, settings.water_goal_liters).hydration_card()
    print(card.label)
    return 0


def cmd_summary(args, cache: HealthDataCache, settings: MetrikaSettings) -> int:
    builder = ReportBuilder(cache.manager, settings.water_goal_liters)
    weight_card = builder.weight_card()
    hydration_card = builder.hydration_card()
    activity = builder.activity_summary()

    if args.json:
        data = {
            "weight": JSONWriter.to_dict(weight_card),
            "hydration": JSONWriter.to_dict(hydration_card),
            "activity": JSONWriter.to_dict(activity),
        }
        print(JSONWriter.dumps(data))
        return 0

    print(f"Peso: {weight_card.value_text} kg ({weight_card.date_text})")
    print(f"Hidratação: {hydration_card.label}")
    print(f"Exercício: {activity.minutes_text} min")
    print(f"Calorias ativas: {activity.calories_text} kcal")
    return 0


def cmd_report(args, cache: HealthDataCache, logger: HealthLogger) -> int:
    report = ReportBuilder(cache.manager).health_report(args.days)
    if not report.has_water_data:
        logger.info("no_water_data", start_date=str(report.start_date))

    output_format = determine_output_format(args.output, args.format)
    if args.output:
        output_path = Path(args.output)
        logger.info("writing_output", output_path=str(output_path), format=output_format)
        if output_format == "csv":
            CSVWriter.write(report, output_path)
        else:
            JSONWriter.write(report, output_path)
        logger.info("output_written", output_path=str(output_path))
    elif output_format == "csv":
        print(CSVWriter.to_csv_string(report), end="")
    else:
        print(JSONWriter.to_json_string(report))
    return 0


def cmd_activity(args, cache: HealthDataCache) -> int:
    summary = ReportBuilder(cache.manager).activity_summary(args.days)

    if args.json:
        print(JSONWriter.to_json_string(summary))
        return 0

    print(f"Exercício: {summary.minutes_text} min")
    print(f"Calorias ativas: {summary.calories_text} kcal")
    if summary.is_empty:
        print(summary.EMPTY_TEXT)
    for row in summary.workouts:
        calories = f" {row.calories_text}" if row.calories_text else ""
        print(f"{row.date.isoformat()} {row.label} {row.duration_text}{calories}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = get_settings()
        if args.store:
            settings = settings.with_overrides(store_path=Path(args.store))
    except (ConfigurationError, PydanticValidationError) as e:
        configure_logging(log_format=args.log_format or "json")
        HealthLogger(__name__).error("invalid_settings", error=str(e))
        return 1

    setup_logging(settings, args.verbose, args.log_format)
    logger = HealthLogger(__name__)

    if args.command == "extract":
        return cmd_extract(args, settings, logger)

    try:
        store = JsonHealthStore(settings.store_path)
    except HealthStoreError as e:
        logger.error("store_open_failed", error=e.message, details=e.details)
        return 1

    manager = HealthManager(store, settings=settings)
    try:
        manager.request_authorization()
        cache = HealthDataCache(manager)

        if args.command == "scan":
            return cmd_scan(args, cache, settings, logger)
        if args.command == "weight":
            return cmd_weight(args, cache, logger)
        if args.command == "water":
            return cmd_water(args, cache, settings, logger)
        if args.command == "summary":
            return cmd_summary(args, cache, settings)
        if args.command == "report":
            return cmd_report(args, cache, logger)
        if args.command == "activity":
            return cmd_activity(args, cache)
    except MetrikaException as e:
        logger.error("command_failed", command=args.command, error=e.message)
        return 1
    finally:
        manager.close()

    return 1


if __name__ == "__main__":
    sys.exit(main())
