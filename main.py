"""
Main entry point for the C++ unit test generator.
Discovers header/implementation pairs, generates GoogleTest suites with an
Ollama model, and keeps only suites that compile, pass and reach the coverage
threshold.
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from src.engine.errors import InfrastructureError
from src.pipeline import Pipeline
from src.utils.core.config import Config
from src.utils.core.logger import configure_logging, get_logger


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate GoogleTest unit tests for C++ sources with a local LLM"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: configs/pipeline.yaml)"
    )
    parser.add_argument(
        "--input-dir",
        type=str,
        help="Directory containing .h/.cpp files (overrides paths.input_dir)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory for accepted test files (overrides paths.output_dir)"
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Primary Ollama model (overrides llm.model)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides logging.level)"
    )
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration and apply command line overrides."""
    config = Config(args.config)
    if args.input_dir:
        config.set("paths.input_dir", args.input_dir)
    if args.output_dir:
        config.set("paths.output_dir", args.output_dir)
    if args.model:
        config.set("llm.model", args.model)
    if args.log_level:
        config.set("logging.level", args.log_level)
    return config


def main(argv: list[str] | None = None) -> int:
    """Main pipeline execution."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    configure_logging(config)

    try:
        pipeline = Pipeline(config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        summary = pipeline.run()
    except InfrastructureError as e:
        logger.error(f"Pipeline aborted: {e}")
        return 1

    totals = summary.totals()
    logger.info(f"Generated {totals['persisted']} of {totals['total']} unit test files")
    return 0


if __name__ == "__main__":
    sys.exit(main())
