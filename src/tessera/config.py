"""Configuration management for Tessera.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from tessera.core.authorization import ROLES, Identity
from tessera.core.navigation import NavigationEntry

CONFIG_FILENAME = "tessera.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class StoreConfig:
    """Content store configuration."""

    data_file: Path = field(default_factory=lambda: Path("content.json"))
    default_locale: str = "en"


@dataclass
class SerializerConfig:
    """Tree serialization configuration."""

    max_depth: int | None = None


@dataclass
class AuthConfig:
    """API token to identity mapping."""

    tokens: dict[str, Identity] = field(default_factory=dict)


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    store: StoreConfig
    serializer: SerializerConfig
    auth: AuthConfig
    navigation: list[NavigationEntry] = field(default_factory=list)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for tessera.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            server=ServerConfig(),
            store=StoreConfig(),
            serializer=SerializerConfig(),
            auth=AuthConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            store=cls._parse_store(data.get("store"), config_dir),
            serializer=cls._parse_serializer(data.get("serializer")),
            auth=cls._parse_auth(data.get("auth")),
            navigation=cls._parse_navigation(data.get("navigation")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_store(cls, data: object, config_dir: Path) -> StoreConfig:
        """Parse store configuration section.

        Args:
            data: Raw store section data
            config_dir: Directory containing config file (for relative paths)
        """
        if data is None:
            return StoreConfig(data_file=config_dir / "content.json")

        if not isinstance(data, dict):
            raise ValueError("store section must be a dictionary")

        data_file = data.get("data_file", "content.json")
        if not isinstance(data_file, str):
            raise ValueError("store.data_file must be a string")

        default_locale = data.get("default_locale", "en")
        if not isinstance(default_locale, str):
            raise ValueError("store.default_locale must be a string")

        return StoreConfig(data_file=config_dir / data_file, default_locale=default_locale)

    @classmethod
    def _parse_serializer(cls, data: object) -> SerializerConfig:
        if data is None:
            return SerializerConfig()

        if not isinstance(data, dict):
            raise ValueError("serializer section must be a dictionary")

        max_depth = data.get("max_depth")
        if max_depth is not None:
            if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 1:
                raise ValueError("serializer.max_depth must be a positive integer")

        return SerializerConfig(max_depth=max_depth)

    @classmethod
    def _parse_auth(cls, data: object) -> AuthConfig:
        """Parse auth section.

        Each entry of ``auth.tokens`` maps a bearer token to a table with
        ``id`` and ``role``.
        """
        if data is None:
            return AuthConfig()

        if not isinstance(data, dict):
            raise ValueError("auth section must be a dictionary")

        tokens_raw = data.get("tokens", {})
        if not isinstance(tokens_raw, dict):
            raise ValueError("auth.tokens must be a dictionary")

        tokens: dict[str, Identity] = {}
        for token, entry in tokens_raw.items():
            if not isinstance(entry, dict):
                raise ValueError(f"auth.tokens.{token} must be a dictionary")
            role = entry.get("role", "member")
            if role not in ROLES:
                raise ValueError(f"auth.tokens.{token}.role must be one of {', '.join(ROLES)}")
            identity_id = entry.get("id", token)
            if not isinstance(identity_id, str):
                raise ValueError(f"auth.tokens.{token}.id must be a string")
            tokens[token] = Identity(id=identity_id, role=role)

        return AuthConfig(tokens=tokens)

    @classmethod
    def _parse_navigation(cls, data: object) -> list[NavigationEntry]:
        if data is None:
            return []

        if not isinstance(data, list):
            raise ValueError("navigation must be an array of tables")

        entries: list[NavigationEntry] = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("navigation items must be tables")
            entries.append(NavigationEntry.from_dict(item))
        return entries

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        data_file: Path | None = None,
        default_locale: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        store = self.store
        if data_file is not None or default_locale is not None:
            store = replace(
                self.store,
                data_file=data_file if data_file is not None else self.store.data_file,
                default_locale=(
                    default_locale if default_locale is not None else self.store.default_locale
                ),
            )

        return replace(self, server=server, store=store)
