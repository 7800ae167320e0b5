"""Publisher configuration loading, validation and restoration.

This module handles the .markdown-confluence.json file at the root of the
document tree. The same file is read by the external markdown-confluence
publisher, so the sync run temporarily rewrites it to point the publisher
at the workspace mirror and restores it byte-for-byte afterwards.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigError, ConfigNotFoundError, FilesystemError
from .models import PublishConfig
from .workspace_mirror import MIRROR_DIR_NAME

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        {
          "confluenceBaseUrl": "https://company.atlassian.net",
          "confluenceSpaceKey": "DOCS",
          "confluenceParentId": "123456",
          "atlassianUserName": "me@company.com",
          "atlassianApiToken": "...",
          "folderToPublish": ".",
          "ignore": ["images"]
        }

    Required values missing from the file are filled from environment
    variables (a .env file is honoured via python-dotenv).
    """

    CONFIG_FILE_NAME = '.markdown-confluence.json'

    REQUIRED_FIELDS = [
        'confluenceBaseUrl',
        'confluenceSpaceKey',
        'confluenceParentId',
        'atlassianUserName',
        'atlassianApiToken',
    ]

    # Environment variables consulted, in order, for each missing field
    ENV_MAPPING = {
        'confluenceBaseUrl': ['CONFLUENCE_BASE_URL', 'CONNIE_BASE_URL'],
        'atlassianUserName': ['ATLASSIAN_USER_NAME', 'CONNIE_USER'],
        'confluenceSpaceKey': ['CONFLUENCE_SPACE_KEY', 'CONNIE_SPACE'],
        'confluenceParentId': ['CONFLUENCE_PARENT_ID', 'CONNIE_PARENT'],
        'atlassianApiToken': ['CONFLUENCE_API_TOKEN', 'CONNIE_API_TOKEN'],
    }

    # Paths the publisher must never pick up
    REQUIRED_IGNORES = [MIRROR_DIR_NAME, 'images', 'assets/images']

    DEFAULTS = {
        'folderToPublish': '.',
    }

    @classmethod
    def config_path_for(cls, base_folder: str) -> str:
        """Return the config file path for a document tree root."""
        return os.path.join(base_folder, cls.CONFIG_FILE_NAME)

    @classmethod
    def load_raw(cls, config_path: str, allow_missing: bool = False) -> Dict[str, Any]:
        """Read the JSON configuration file without validating it.

        Args:
            config_path: Path to .markdown-confluence.json
            allow_missing: Return an empty mapping instead of raising when
                           the file doesn't exist

        Returns:
            Raw configuration mapping

        Raises:
            ConfigNotFoundError: If the file is missing and allow_missing is False
            FilesystemError: If the file can't be read
            ConfigError: If the file is not a JSON object
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            if allow_missing:
                return {}
            raise ConfigNotFoundError(config_path)
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        if not content.strip():
            return {}

        try:
            config_dict = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON syntax: {str(e)}")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a JSON object, got {type(config_dict).__name__}"
            )

        return config_dict

    @classmethod
    def apply_env_fallback(cls, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Fill missing required values from environment variables.

        Args:
            config_dict: Raw configuration mapping

        Returns:
            A new mapping with environment values added for missing fields
        """
        load_dotenv()
        filled = dict(config_dict)
        for config_key, env_keys in cls.ENV_MAPPING.items():
            if filled.get(config_key):
                continue
            for env_key in env_keys:
                value = os.getenv(env_key)
                if value:
                    filled[config_key] = value
                    logger.debug(f"Found {config_key} in environment variable {env_key}")
                    break
        return filled

    @classmethod
    def missing_fields(cls, config_dict: Dict[str, Any]) -> List[str]:
        """Return required fields that are absent or blank."""
        return [
            key for key in cls.REQUIRED_FIELDS
            if not str(config_dict.get(key) or '').strip()
        ]

    @classmethod
    def load(cls, config_path: str, use_env: bool = True) -> PublishConfig:
        """Load, complete and validate the configuration.

        A missing file is tolerated when the environment provides every
        required value.

        Args:
            config_path: Path to .markdown-confluence.json
            use_env: Fill missing values from environment variables

        Returns:
            Validated PublishConfig

        Raises:
            ConfigError: If required values are missing or invalid
            FilesystemError: If the file can't be read
        """
        config_dict = cls.load_raw(config_path, allow_missing=use_env)
        if use_env:
            config_dict = cls.apply_env_fallback(config_dict)
        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> PublishConfig:
        """Validate a raw mapping and build a PublishConfig.

        Raises:
            ConfigError: If required values are missing or invalid
        """
        missing = cls.missing_fields(config_dict)
        if missing:
            raise ConfigError(
                f"Missing required fields: {', '.join(missing)}"
            )

        ignore = config_dict.get('ignore', [])
        if ignore is None:
            ignore = []
        if not isinstance(ignore, list):
            raise ConfigError("Field 'ignore' must be a list", 'ignore')

        folder_to_publish = config_dict.get('folderToPublish') or cls.DEFAULTS['folderToPublish']
        if not isinstance(folder_to_publish, str):
            raise ConfigError("Field 'folderToPublish' must be a string", 'folderToPublish')

        return PublishConfig(
            base_url=str(config_dict['confluenceBaseUrl']).strip().rstrip('/'),
            space_key=str(config_dict['confluenceSpaceKey']).strip(),
            parent_id=str(config_dict['confluenceParentId']).strip(),
            user_name=str(config_dict['atlassianUserName']).strip(),
            api_token=str(config_dict['atlassianApiToken']).strip(),
            folder_to_publish=folder_to_publish,
            ignore=[str(entry) for entry in ignore],
            raw=dict(config_dict),
        )

    @classmethod
    def save(cls, config_path: str, config_dict: Dict[str, Any]) -> None:
        """Write a configuration mapping as indented JSON.

        Raises:
            FilesystemError: If the file can't be written
        """
        content = json.dumps(config_dict, indent=2) + "\n"
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except PermissionError:
            raise FilesystemError(config_path, 'write', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'write', str(e))

    @classmethod
    def with_required_ignores(cls, ignore: Optional[List[str]]) -> List[str]:
        """Append the mirror and image folders to an ignore list.

        Existing entries keep their order and nothing is added twice.
        """
        result = list(ignore or [])
        for entry in cls.REQUIRED_IGNORES:
            if entry not in result:
                result.append(entry)
        return result

    @classmethod
    def publish_overrides(
        cls,
        config_dict: Dict[str, Any],
        content_root: str,
        config: Optional[PublishConfig] = None,
    ) -> Dict[str, Any]:
        """Build the configuration the publisher runs with.

        content_root is already a copy of the folder to publish, so
        folderToPublish is reset to ".". Target settings resolved from the
        environment or a prompt are written from config; credentials never
        are.

        Args:
            config_dict: Configuration as read from disk
            content_root: Directory the publisher should read documents from
            config: Resolved configuration supplying the target settings

        Returns:
            A copy of config_dict with contentRoot, folderToPublish, the
            target settings and a completed ignore list
        """
        overridden = dict(config_dict)
        if config is not None:
            overridden['confluenceBaseUrl'] = config.base_url
            overridden['confluenceSpaceKey'] = config.space_key
            overridden['confluenceParentId'] = config.parent_id
        overridden['contentRoot'] = content_root
        overridden['folderToPublish'] = '.'
        overridden['ignore'] = cls.with_required_ignores(config_dict.get('ignore'))
        return overridden

    @classmethod
    def snapshot(cls, config_path: str) -> Optional[bytes]:
        """Capture the exact bytes of the config file (None if it doesn't exist).

        Raises:
            FilesystemError: If the file exists but can't be read
        """
        try:
            with open(config_path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

    @classmethod
    def restore(cls, config_path: str, snapshot: Optional[bytes]) -> None:
        """Put the config file back exactly as captured by snapshot().

        A file that didn't exist before is removed.

        Raises:
            FilesystemError: If the file can't be written or removed
        """
        try:
            if snapshot is None:
                if os.path.exists(config_path):
                    os.remove(config_path)
                return
            with open(config_path, 'wb') as f:
                f.write(snapshot)
        except OSError as e:
            raise FilesystemError(config_path, 'restore', str(e))
