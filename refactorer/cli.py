"""
Entry point for the refactorer command-line interface (exposed as `refactorer`).

Given an instruction and a glob pattern, the CLI sends every matching
file, together with the instruction, to the OpenAI Chat Completions API
and overwrites the file with the rewritten contents the model returns.

Usage examples::

    # Rename variables in every Python file of the current directory
    refactorer -i "Replace all variable names starting with 'old_' with 'new_'" -p "*.py"

    # Read the instruction from a file and use another model
    refactorer -i instructions.txt -p "src/**/*.py" -m gpt-4o

    # Four files at a time, verbose logging
    refactorer -i instructions.txt -p "*.rs" -w 4 --log-level DEBUG

Files are processed independently: a failure on one file is logged and
the batch continues.  Exit status is 0 when every file was rewritten (or
nothing matched), 1 on a startup error, and 3 when at least one file
failed.  Running the same batch twice is not guaranteed to produce the
same output, since the model may answer differently each time.
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .batch import BatchRunner
from .config import RefactorerConfig
from .errors import InstructionError
from .file_set import resolve_files
from .file_store import LocalFileStore
from .instruction import FileInstruction, resolve_instruction
from .openai_client import OpenAIClient

EXIT_STARTUP_ERROR = 1
EXIT_INTERRUPTED = 130


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refactorer",
        description="Apply an instruction to every file matching a pattern using the OpenAI API.",
    )
    parser.add_argument(
        "-i",
        "--instruction",
        required=True,
        metavar="INSTRUCTION",
        help="Instruction to follow or a path to a file containing instructions.",
    )
    parser.add_argument(
        "-p",
        "--pattern",
        required=True,
        metavar="FILE_PATTERN",
        help="File pattern to apply the changes to (e.g. '*.py').",
    )
    parser.add_argument(
        "-m",
        "--model",
        default=None,
        metavar="MODEL",
        help="OpenAI model to use for the change (default: gpt-4, or the config file value).",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Number of files to process at once (default: 1).",
    )
    parser.add_argument(
        "--max-output-tokens",
        type=int,
        default=None,
        help="Maximum number of tokens to generate per file (default: provider default).",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Sampling temperature (default: 0).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.environ.get("REFACTORER_LOGLEVEL", "INFO").upper(),
        help="Logging verbosity (default from env REFACTORER_LOGLEVEL or INFO).",
    )
    return parser


def configure_logging(log_level: str) -> None:
    """Set up logging honoring --log-level and enable httpx/openai logs at the same level."""
    level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(asctime)s %(name)s:%(lineno)d - %(message)s",
    )
    logging.getLogger().setLevel(level)
    # The SDK logs every request at INFO; keep it one notch quieter unless debugging.
    sdk_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    logging.getLogger("httpx").setLevel(sdk_level)
    logging.getLogger("openai").setLevel(sdk_level)


def main(argv: Optional[List[str]] = None) -> int:
    """Primary CLI entry point.

    Resolves the instruction and file set, runs the batch, and returns
    an exit code.
    """
    args = create_arg_parser().parse_args(argv)
    configure_logging(args.log_level)
    logger = logging.getLogger("refactorer.cli")

    config = RefactorerConfig.load(Path.cwd())
    logger.debug("Loaded configuration from %s", config.config_path or "defaults")

    api_key = config.openai_api_key
    if not api_key:
        logger.error("OPENAI_API_KEY is not set in the environment.")
        return EXIT_STARTUP_ERROR

    try:
        instruction = resolve_instruction(args.instruction)
    except InstructionError as exc:
        logger.error("%s", exc)
        return EXIT_STARTUP_ERROR

    settings = config.completion
    if args.model:
        settings = replace(settings, model=args.model)
    if args.max_output_tokens is not None:
        settings = replace(settings, max_output_tokens=args.max_output_tokens)
    if args.temperature is not None:
        settings = replace(settings, temperature=args.temperature)
    workers = args.workers if args.workers is not None else config.workers
    if workers < 1:
        logger.error("--workers must be at least 1, got %d", workers)
        return EXIT_STARTUP_ERROR

    files = resolve_files(args.pattern)
    logger.info(
        "Execution context: cwd=%s | pattern=%s | files=%d | model=%s | instruction=%s | workers=%d",
        Path.cwd(),
        args.pattern,
        len(files),
        settings.model,
        instruction.path if isinstance(instruction, FileInstruction) else "<literal>",
        workers,
    )
    if not files:
        logger.warning("No files matched pattern %r; nothing to do.", args.pattern)
        return 0

    client = OpenAIClient(api_key=api_key, settings=settings, base_url=config.openai_base_url)
    runner = BatchRunner(
        client=client,
        store=LocalFileStore(),
        instruction=instruction.text,
        model=settings.model,
        workers=workers,
    )

    try:
        report = runner.run(files)
    except KeyboardInterrupt:
        logger.warning("Interrupted; files already rewritten keep their new contents.")
        return EXIT_INTERRUPTED

    if report.ok:
        logger.info("%s", report.summary())
    else:
        logger.error("%s", report.summary())
    return report.exit_code


if __name__ == "__main__":  # pragma: no cover
    import sys
    raise SystemExit(main(sys.argv[1:]))
