"""
Configuration file support for Company Manager.

Provides:
- Config dataclasses for holding configuration values
- TOML config file loading (company_manager.toml)
- Precedence: CLI > config file > defaults
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError
from .paths import get_repo_root

logger = logging.getLogger(__name__)

# Default config file name
DEFAULT_CONFIG_NAME = "company_manager.toml"

# Storage slot holding the whole collection
DEFAULT_SLOT = "companies"

DEFAULT_SKILL_CATALOG = [
    "Python",
    "JavaScript",
    "TypeScript",
    "Go",
    "Java",
    "C#",
    "C++",
    "SQL",
    "HTML/CSS",
    "React",
    "Node.js",
    "Django",
    "Docker",
    "Kubernetes",
    "AWS",
    "Azure",
    "Git",
    "Linux",
    "Project Management",
    "Communication",
]


@dataclass
class PathsConfig:
    """Path configuration."""

    db: Optional[str] = None


@dataclass
class StorageConfig:
    """Storage slot configuration."""

    slot: str = DEFAULT_SLOT


@dataclass
class WebConfig:
    """Web server configuration."""

    host: str = "127.0.0.1"
    port: int = 5000


@dataclass
class FormConfig:
    """Form timing configuration, in milliseconds."""

    navigate_delay_ms: int = 800
    toast_ms: int = 2000


@dataclass
class SkillsConfig:
    """Selectable skill names."""

    catalog: List[str] = field(default_factory=lambda: list(DEFAULT_SKILL_CATALOG))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    log_file: Optional[str] = None


@dataclass
class Config:
    """Complete configuration for Company Manager."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    web: WebConfig = field(default_factory=WebConfig)
    form: FormConfig = field(default_factory=FormConfig)
    skills: SkillsConfig = field(default_factory=SkillsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    config_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config_path: Optional[Path] = None) -> "Config":
        """Create Config from a dictionary (parsed TOML)."""
        sections = {}
        for name in ("paths", "storage", "web", "form", "skills", "logging"):
            section = data.get(name, {})
            if not isinstance(section, dict):
                raise ConfigError(f"[{name}] must be a table, got {type(section).__name__}")
            sections[name] = section
        paths_data = sections["paths"]
        storage_data = sections["storage"]
        web_data = sections["web"]
        form_data = sections["form"]
        skills_data = sections["skills"]
        logging_data = sections["logging"]

        catalog = skills_data.get("catalog")
        if catalog is not None and not isinstance(catalog, list):
            raise ConfigError("skills.catalog must be a list of names")

        return cls(
            paths=PathsConfig(db=paths_data.get("db")),
            storage=StorageConfig(slot=storage_data.get("slot", DEFAULT_SLOT)),
            web=WebConfig(
                host=web_data.get("host", "127.0.0.1"),
                port=int(web_data.get("port", 5000)),
            ),
            form=FormConfig(
                navigate_delay_ms=int(form_data.get("navigate_delay_ms", 800)),
                toast_ms=int(form_data.get("toast_ms", 2000)),
            ),
            skills=SkillsConfig(
                catalog=[str(name) for name in catalog] if catalog is not None
                else list(DEFAULT_SKILL_CATALOG)
            ),
            logging=LoggingConfig(
                level=logging_data.get("level", "WARNING"),
                log_file=logging_data.get("log_file"),
            ),
            config_path=config_path,
        )

    def resolve_db_path(self) -> Optional[Path]:
        """Database path from the config, relative paths taken from the config file's directory."""
        if not self.paths.db:
            return None
        db = Path(self.paths.db)
        if db.is_absolute() or self.config_path is None:
            return db
        return self.config_path.parent / db


class ConfigError(ConfigurationError):
    """Error loading or parsing configuration."""


def find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find the configuration file.

    Search order:
    1. Explicit path if provided
    2. company_manager.toml in current directory
    3. company_manager.toml in repository root

    Returns:
        Path to config file, or None if not found.
    """
    if config_path is not None:
        if config_path.exists():
            return config_path
        raise ConfigError(f"Config file not found: {config_path}")

    cwd_config = Path.cwd() / DEFAULT_CONFIG_NAME
    if cwd_config.exists():
        return cwd_config

    root_config = get_repo_root() / DEFAULT_CONFIG_NAME
    if root_config.exists():
        return root_config

    return None


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from a TOML file.

    If no config file is found, returns default configuration.

    Raises:
        ConfigError: If config file exists but cannot be parsed.
    """
    config_file = find_config_file(config_path)

    if config_file is None:
        logger.debug("No config file found, using defaults")
        return Config()

    logger.debug(f"Loading config from: {config_file}")

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_file}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}")

    try:
        config = Config.from_dict(data, config_path=config_file)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in {config_file}: {e}")
    logger.info(f"Loaded config from: {config_file}")
    return config
