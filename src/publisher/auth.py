"""Credential pass-through for the external publisher.

The markdown-confluence publisher looks for its API token and user name
under several environment variable names. This module collects the
credentials from the configuration (or the environment, via python-dotenv)
and exposes them under every alias the publisher understands. Credentials
are never logged.
"""

import logging
import os
from typing import Dict, NamedTuple, Optional

from dotenv import load_dotenv

from src.doc_tree.models import PublishConfig

logger = logging.getLogger(__name__)


class Credentials(NamedTuple):
    """Atlassian API credentials."""
    user: str
    api_token: str


# Environment variables the publisher reads, per credential
TOKEN_ALIASES = ['MARKDOWN_CONFLUENCE_TOKEN', 'CONFLUENCE_TOKEN', 'ATLASSIAN_API_TOKEN']
USER_ALIASES = ['MARKDOWN_CONFLUENCE_USERNAME', 'CONFLUENCE_USERNAME']

# Source variables, in order of precedence
TOKEN_SOURCES = ['CONNIE_API_TOKEN', 'CONFLUENCE_API_TOKEN']
USER_SOURCES = ['CONNIE_USER', 'ATLASSIAN_USER_NAME']


class Authenticator:
    """Resolves credentials and builds the publisher subprocess environment.

    Example:
        >>> auth = Authenticator(config)
        >>> env = auth.publisher_env()
    """

    def __init__(self, config: Optional[PublishConfig] = None):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            config: Loaded configuration; its credentials take precedence
                    over the environment
        """
        load_dotenv()
        self._config = config

    def get_credentials(self) -> Credentials:
        """Return the credentials to hand to the publisher.

        Values may be empty if neither the configuration nor the environment
        provides them; the publisher reports that itself.
        """
        user = self._config.user_name if self._config else ""
        token = self._config.api_token if self._config else ""
        if not user:
            user = _first_env(USER_SOURCES)
        if not token:
            token = _first_env(TOKEN_SOURCES)
        return Credentials(user=user, api_token=token)

    def publisher_env(self, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Build the environment for the publisher subprocess.

        Args:
            base_env: Environment to extend (defaults to os.environ)

        Returns:
            A copy of base_env with every credential alias set
        """
        env = dict(os.environ if base_env is None else base_env)
        creds = self.get_credentials()
        if creds.api_token:
            for alias in TOKEN_ALIASES:
                env[alias] = creds.api_token
        if creds.user:
            for alias in USER_ALIASES:
                env[alias] = creds.user

        logger.debug(
            f"Publisher credentials present: token={bool(creds.api_token)}, user={bool(creds.user)}"
        )
        return env


def _first_env(names) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return ""
