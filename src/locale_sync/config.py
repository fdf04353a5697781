"""Sync options for one run.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    LOCALE_SYNC_PROJECT_ID: Remote project id (required)
    LOCALE_SYNC_API_KEY: Credential forwarded as Authorization header
    LOCALE_SYNC_VERSION: Project version (default: latest)
    LOCALE_SYNC_API_PATH: API base URL (default: https://api.locize.app)
    LOCALE_SYNC_PATH: Local root directory (default: ./locales)
    LOCALE_SYNC_REFERENCE_LANGUAGE: Reference language (default: from remote)
    LOCALE_SYNC_FORMAT: File format (default: json)
    LOCALE_SYNC_LANGUAGE_FOLDER_PREFIX: Prefix of language folders (default: "")
    LOCALE_SYNC_SKIP_EMPTY: Do not write empty namespaces (default: false)
    LOCALE_SYNC_UPDATE_VALUES: Push changed values too (default: false)
    LOCALE_SYNC_SETTLE_DELAY: Seconds to wait between push and pull (default: 5)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import InvalidFormatError
from .formats import parse_format

logger = logging.getLogger(__name__)

DEFAULT_API_PATH = "https://api.locize.app"
DEFAULT_VERSION = "latest"
DEFAULT_PATH = "./locales"
DEFAULT_FORMAT = "json"
DEFAULT_SETTLE_DELAY = 5.0


@dataclass(frozen=True)
class SyncOptions:
    project_id: str
    version: str = DEFAULT_VERSION
    api_path: str = DEFAULT_API_PATH
    api_key: str | None = None
    path: str = DEFAULT_PATH
    reference_language: str | None = None
    format: str = DEFAULT_FORMAT
    language_folder_prefix: str = ""
    dry: bool = False
    clean: bool = False
    skip_empty: bool = False
    update_values: bool = False
    omit_reference: bool = False
    settle_delay: float = DEFAULT_SETTLE_DELAY
    timeout: tuple[float, float] = (10, 60)


def validate_options(options: SyncOptions) -> None:
    """Validate option values and raise ValueError if invalid.

    Args:
        options: SyncOptions instance to validate.

    Raises:
        ValueError: If the project id is empty, the API path is not an
            http(s) URL, the format is unknown or the delay is negative.
    """
    if not options.project_id.strip():
        raise ValueError(
            "Project id cannot be empty. Set LOCALE_SYNC_PROJECT_ID environment variable."
        )

    if not options.api_path.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid API path '{options.api_path}': must start with http:// or https://"
        )
    if not urlparse(options.api_path).hostname:
        raise ValueError(
            f"Invalid API path '{options.api_path}': URL must include a hostname"
        )

    try:
        parse_format(options.format)
    except InvalidFormatError as e:
        raise ValueError(str(e)) from None

    if options.settle_delay < 0:
        raise ValueError(
            f"Invalid settle delay {options.settle_delay}: must not be negative"
        )

    if not options.api_key:
        logger.debug(
            "No API key configured; only public projects can be read and nothing can be pushed"
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_flag(cli_value: bool, env_key: str, fallback: object) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_options(
    project_id: str | None = None,
    api_key: str | None = None,
    version: str | None = None,
    api_path: str | None = None,
    path: str | None = None,
    reference_language: str | None = None,
    format: str | None = None,
    language_folder_prefix: str | None = None,
    settle_delay: float | None = None,
    dry: bool = False,
    clean: bool = False,
    skip_empty: bool = False,
    update_values: bool = False,
    omit_reference: bool = False,
    yaml_fallbacks: dict | None = None,
) -> SyncOptions:
    """Load sync options with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.
    ``dry`` and ``clean`` are per-invocation switches and are only taken
    from the CLI.

    Args:
        yaml_fallbacks: Flat dict of values from the YAML config file
            (``project`` and ``sync`` sections merged). Used as fallback
            when CLI arg and env var are both unset.

    Returns:
        Validated SyncOptions instance.

    Raises:
        ValueError: If the project id is missing after checking all
            sources, or a value is invalid.
    """
    fb = yaml_fallbacks or {}

    def pick(cli_value: str | None, env_key: str, fb_key: str) -> str | None:
        value = cli_value or os.getenv(env_key) or fb.get(fb_key)
        return value.strip() if isinstance(value, str) else value

    final_project_id = pick(project_id, "LOCALE_SYNC_PROJECT_ID", "project_id")
    if not final_project_id:
        raise ValueError(
            "Project id not found. Set LOCALE_SYNC_PROJECT_ID environment variable, "
            "pass --project-id CLI argument, or add 'project.id' to config.yml."
        )

    if settle_delay is not None:
        final_delay = float(settle_delay)
    else:
        delay_raw = os.getenv("LOCALE_SYNC_SETTLE_DELAY")
        if delay_raw is not None:
            try:
                final_delay = float(delay_raw)
            except ValueError:
                raise ValueError(
                    f"Invalid LOCALE_SYNC_SETTLE_DELAY '{delay_raw}': must be a number of seconds"
                ) from None
        elif fb.get("settle_delay") is not None:
            final_delay = float(fb["settle_delay"])
        else:
            final_delay = DEFAULT_SETTLE_DELAY

    options = SyncOptions(
        project_id=final_project_id,
        api_key=pick(api_key, "LOCALE_SYNC_API_KEY", "api_key"),
        version=pick(version, "LOCALE_SYNC_VERSION", "version")
        or DEFAULT_VERSION,
        api_path=(
            pick(api_path, "LOCALE_SYNC_API_PATH", "api_path")
            or DEFAULT_API_PATH
        ).removesuffix("/"),
        path=pick(path, "LOCALE_SYNC_PATH", "path") or DEFAULT_PATH,
        reference_language=pick(
            reference_language,
            "LOCALE_SYNC_REFERENCE_LANGUAGE",
            "reference_language",
        ),
        format=pick(format, "LOCALE_SYNC_FORMAT", "format") or DEFAULT_FORMAT,
        language_folder_prefix=pick(
            language_folder_prefix,
            "LOCALE_SYNC_LANGUAGE_FOLDER_PREFIX",
            "language_folder_prefix",
        )
        or "",
        dry=dry,
        clean=clean,
        skip_empty=_resolve_flag(
            skip_empty, "LOCALE_SYNC_SKIP_EMPTY", fb.get("skip_empty")
        ),
        update_values=_resolve_flag(
            update_values,
            "LOCALE_SYNC_UPDATE_VALUES",
            fb.get("update_values"),
        ),
        omit_reference=omit_reference or bool(fb.get("omit_reference")),
        settle_delay=final_delay,
    )

    validate_options(options)

    return options
