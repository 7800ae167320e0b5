"""Interactive completion of the publisher configuration.

Loads .markdown-confluence.json (with environment fallbacks) and, when
prompting is enabled, asks for any required value that is still missing
and offers to save the answers.
"""

import logging
from typing import Dict

import typer

from src.doc_tree.config_loader import ConfigLoader
from src.doc_tree.errors import ConfigError
from src.doc_tree.models import PublishConfig

from .output import OutputHandler

logger = logging.getLogger(__name__)


def ensure_config(config_path: str, output: OutputHandler, prompt: bool = False) -> PublishConfig:
    """Load the configuration, prompting for missing values if allowed.

    Args:
        config_path: Path to .markdown-confluence.json
        output: Output handler for user-facing messages
        prompt: Ask for missing required values instead of failing

    Returns:
        Validated PublishConfig

    Raises:
        ConfigError: If required values are missing and prompting is off
    """
    on_disk = ConfigLoader.load_raw(config_path, allow_missing=True)
    if on_disk:
        output.info(f"Found local configuration at: {config_path}")

    config_dict = ConfigLoader.apply_env_fallback(on_disk)
    missing = ConfigLoader.missing_fields(config_dict)
    if not missing:
        return ConfigLoader.from_dict(config_dict)

    if not prompt:
        raise ConfigError(
            f"Missing required fields: {', '.join(missing)}. "
            f"Add them to {config_path}, export them as environment variables, "
            f"or rerun with --prompt"
        )

    output.print("Some required configuration values are missing:")
    answers: Dict[str, str] = {}
    for key in missing:
        value = typer.prompt(f"Enter {key}", hide_input=(key == 'atlassianApiToken'))
        if not value.strip():
            raise ConfigError("This field is required", key)
        answers[key] = value.strip()

    if typer.confirm("Would you like to save these values to local config?", default=True):
        ConfigLoader.save(config_path, {**on_disk, **answers})
        output.success(f"Saved configuration at {config_path}")
        output.print("Tip: To avoid entering these values again, you can export them in your shell:")
        for key in missing:
            env_name = ConfigLoader.ENV_MAPPING[key][0]
            shown = '<token>' if key == 'atlassianApiToken' else answers[key]
            output.print(f'export {env_name}="{shown}"')
    else:
        output.info("Continuing without saving configuration.")

    return ConfigLoader.from_dict({**config_dict, **answers})
