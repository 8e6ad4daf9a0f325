import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import dotenv_values


class ConfigError(Exception):
    """Configuration error."""
    pass


# Scopes covering every operation of the user-authenticated adapter
DEFAULT_USER_SCOPES = [
    'user-read-private',            # Profile and product tier
    'user-read-email',              # Profile email
    'user-read-playback-state',     # Playback state, devices, queue
    'user-modify-playback-state',   # Playback control
    'user-read-currently-playing',  # Current item
    'user-read-recently-played',    # Recently played
    'user-top-read',                # Top tracks and artists
    'user-library-read',            # Saved tracks and albums
    'user-library-modify',          # Save and remove
    'user-follow-read',             # Followed artists
    'user-follow-modify',           # Follow and unfollow
    'playlist-read-private',        # Private playlists
    'playlist-modify-public',       # Create/modify public playlists
    'playlist-modify-private',      # Create/modify private playlists
]


@dataclass(frozen=True)
class SpotifyConfig:
    """Client-credentials configuration for the read-only adapter."""

    client_id: str
    client_secret: str


@dataclass(frozen=True)
class SpotifyUserAuthConfig:
    """PKCE configuration for the user-authenticated adapter."""

    client_id: str
    redirect_uri: str
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_USER_SCOPES))


def get_scope_string(scopes: List[str]) -> str:
    """Get scopes as space-separated string."""
    return ' '.join(scopes)


def validate_scopes(scopes: str, required: Optional[List[str]] = None) -> bool:
    """Validate that provided scopes include all required ones."""
    return not get_missing_scopes(scopes, required)


def get_missing_scopes(scopes: str, required: Optional[List[str]] = None) -> List[str]:
    """Get list of missing required scopes, in declaration order."""
    provided_scopes = set(scopes.split())
    required_scopes = required if required is not None else DEFAULT_USER_SCOPES
    return [scope for scope in required_scopes if scope not in provided_scopes]


class SettingsLoader:
    """Loads adapter configuration from an optional .env file and the environment.

    Process environment variables take precedence over the .env file.
    """

    def __init__(self, env_file: Optional[str] = None,
                 environ: Optional[Dict[str, str]] = None):
        """Initialize settings loader."""
        self.env_file = Path(env_file) if env_file else Path.cwd() / '.env'
        self._environ = environ if environ is not None else os.environ

    def load_env_vars(self) -> Dict[str, str]:
        """Load variables from the .env file overlaid by the environment."""
        env_vars: Dict[str, str] = {}

        if self.env_file.exists():
            try:
                values = dotenv_values(self.env_file)
            except OSError as e:
                raise ConfigError(f"Failed to load .env file {self.env_file}: {e}")
            env_vars.update({k: v for k, v in values.items() if v is not None})

        for key in ('SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET',
                    'SPOTIFY_REDIRECT_URI', 'SPOTIFY_SCOPES'):
            if self._environ.get(key):
                env_vars[key] = self._environ[key]

        return env_vars

    def get_client_credentials_config(self) -> SpotifyConfig:
        """Get configuration for the client-credentials flow."""
        env_vars = self.load_env_vars()

        client_id = env_vars.get('SPOTIFY_CLIENT_ID')
        client_secret = env_vars.get('SPOTIFY_CLIENT_SECRET')

        if not client_id:
            raise ConfigError("SPOTIFY_CLIENT_ID not found in environment")
        if not client_secret:
            raise ConfigError("SPOTIFY_CLIENT_SECRET not found in environment")

        return SpotifyConfig(client_id=client_id, client_secret=client_secret)

    def get_user_auth_config(self) -> SpotifyUserAuthConfig:
        """Get configuration for the PKCE user flow."""
        env_vars = self.load_env_vars()

        client_id = env_vars.get('SPOTIFY_CLIENT_ID')
        redirect_uri = env_vars.get('SPOTIFY_REDIRECT_URI')

        if not client_id:
            raise ConfigError("SPOTIFY_CLIENT_ID not found in environment")
        if not redirect_uri:
            raise ConfigError("SPOTIFY_REDIRECT_URI not found in environment")

        scope_string = env_vars.get('SPOTIFY_SCOPES')
        scopes = scope_string.split() if scope_string else list(DEFAULT_USER_SCOPES)

        return SpotifyUserAuthConfig(client_id=client_id, redirect_uri=redirect_uri,
                                     scopes=scopes)

    def validate_configuration(self) -> Dict[str, bool]:
        """Validate that required configuration is present."""
        env_vars = self.load_env_vars()
        scope_string = env_vars.get('SPOTIFY_SCOPES')

        return {
            'spotify_client_id': bool(env_vars.get('SPOTIFY_CLIENT_ID')),
            'spotify_client_secret': bool(env_vars.get('SPOTIFY_CLIENT_SECRET')),
            'spotify_redirect_uri': bool(env_vars.get('SPOTIFY_REDIRECT_URI')),
            'spotify_scopes': scope_string is None or validate_scopes(scope_string),
        }

    def get_config_summary(self) -> Dict[str, Any]:
        """Get configuration summary (without sensitive data)."""
        env_vars = self.load_env_vars()
        scope_string = env_vars.get('SPOTIFY_SCOPES')

        return {
            'env_file': str(self.env_file),
            'validation': self.validate_configuration(),
            'scopes': scope_string.split() if scope_string else list(DEFAULT_USER_SCOPES),
            'missing_scopes': get_missing_scopes(scope_string) if scope_string else [],
        }
