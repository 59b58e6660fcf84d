"""
Configuration management for the refactorer CLI.

This module centralizes loading of configuration values from environment
variables and an optional JSON configuration file.  It defines sane
defaults and provides an interface for the rest of the application to
query these settings.

The configuration file `refactorer_config.json` lets a project pin the
model and request parameters used for every batch, for example::

    {
      "completion": {"model": "gpt-4o", "temperature": 0, "request_timeout": 300},
      "workers": 4
    }

If the configuration file is absent, reasonable defaults are used.
Command-line flags always take precedence over file values.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

CONFIG_FILE = "refactorer_config.json"
DEFAULT_MODEL = "gpt-4"

logger = logging.getLogger(__name__)


@dataclass
class CompletionSettings:
    """Parameters forwarded to the completion endpoint.

    Attributes
    ----------
    model: str
        Model identifier sent verbatim to the endpoint.

    temperature: float
        Sampling temperature.  Zero keeps rewrites as deterministic as
        the provider allows.

    max_output_tokens: Optional[int]
        Upper bound on generated tokens.  ``None`` leaves the provider
        default in place.

    request_timeout: float
        Seconds to wait for a single completion before it is reported as
        a network failure.
    """

    model: str = DEFAULT_MODEL
    temperature: float = 0.0
    max_output_tokens: Optional[int] = None
    request_timeout: float = 600.0


@dataclass
class RefactorerConfig:
    """Top-level configuration for the refactorer CLI.

    Attributes
    ----------
    openai_api_key: str
        The API key used to authenticate with OpenAI.  Loaded from the
        environment; a missing key is a fatal startup error for the CLI.

    openai_base_url: str
        Optional alternative endpoint (proxies, compatible gateways).

    completion: CompletionSettings
        Request parameters shared by every file in the batch.

    workers: int
        Number of files processed at once.  1 means strictly sequential.

    config_path: Path
        Path to the configuration file this object was loaded from.
        Retained for logging and debugging purposes.
    """

    openai_api_key: str | None
    openai_base_url: str | None = None
    completion: CompletionSettings = field(default_factory=CompletionSettings)
    workers: int = 1
    config_path: Path | None = None

    @staticmethod
    def _parse(data: Dict[str, Any]) -> Tuple[CompletionSettings, int]:
        completion = CompletionSettings(**data.get("completion", {}))
        workers = int(data.get("workers", 1))
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        return completion, workers

    @staticmethod
    def load(base_dir: Path) -> "RefactorerConfig":
        """Load configuration values from `refactorer_config.json` and the
        environment.

        Parameters
        ----------
        base_dir: Path
            The directory where the CLI command is being executed.  This
            directory is scanned for a `refactorer_config.json` file.

        Returns
        -------
        RefactorerConfig
            A populated configuration object.
        """
        config_path = base_dir / CONFIG_FILE
        completion = CompletionSettings()
        workers = 1
        if config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
                completion, workers = RefactorerConfig._parse(data)
            except (OSError, ValueError, TypeError, AttributeError) as exc:
                logger.warning("Failed to parse %s: %s; using defaults.", config_path, exc)
                completion, workers = CompletionSettings(), 1

        return RefactorerConfig(
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
            openai_base_url=os.environ.get("OPENAI_BASE_URL") or None,
            completion=completion,
            workers=workers,
            config_path=config_path if config_path.exists() else None,
        )
