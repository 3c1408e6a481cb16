"""
Configuration Management Module

This module provides a centralized way to load and access configuration settings
from the config.yaml file. It uses the Singleton pattern to ensure only one
configuration instance exists throughout the application.

Environment variables (optionally loaded from .env / .env.local) override the
file for anything deployment-specific: AWS region and credentials, the
listening port and the collection name.

Usage:
    from core.config import get_config, get_rekognition_settings
    config = get_config()
    settings = get_rekognition_settings()
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv


# Store the singleton instance (module-level variable)
_config_instance: Optional[Dict[str, Any]] = None

DEFAULT_PORT = 5000
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class AWSCredentials:
    """Explicit AWS credentials. Empty values defer to boto3's default chain."""
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None

    @property
    def is_explicit(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


@dataclass(frozen=True)
class RekognitionSettings:
    """Everything needed to build a Rekognition client and query the collection."""
    region: str
    collection_id: str
    face_match_threshold: float = 90.0
    max_faces: int = 1
    credentials: AWSCredentials = field(default_factory=AWSCredentials)


def get_project_root() -> Path:
    """
    Find the project root directory.

    The project root is identified by the presence of config.yaml file.
    This function walks up the directory tree from this file's location
    until it finds config.yaml.

    Returns:
        Path: The absolute path to the project root directory.

    Raises:
        FileNotFoundError: If config.yaml cannot be found in any parent directory.
    """
    current_dir = Path(__file__).resolve().parent

    while current_dir != current_dir.parent:
        config_path = current_dir / "config.yaml"
        if config_path.exists():
            return current_dir
        current_dir = current_dir.parent

    raise FileNotFoundError(
        "Could not find config.yaml in any parent directory. "
        "Make sure you're running from within the project directory."
    )


def load_environment() -> bool:
    """
    Load `.env` first, then let `.env.local` override it.

    Variables already present in the process environment always win over
    `.env`. Returns True if any file was loaded.
    """
    loaded = False
    for filename, override in ((".env", False), (".env.local", True)):
        path = find_dotenv(filename=filename, raise_error_if_not_found=False, usecwd=True)
        if path:
            loaded = load_dotenv(path, override=override) or loaded
    return loaded


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Optional path to the config file.
                     If not provided, uses the default config.yaml in project root.

    Returns:
        Dict containing all configuration values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    if config_path is None:
        config_path = get_project_root() / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the configuration singleton.

    The first call (or any call with reload=True) also loads .env files so
    that environment overrides are visible to the section helpers below.

    Args:
        reload: If True, forces reloading the configuration from disk.

    Returns:
        Dict containing all configuration values.
    """
    global _config_instance

    if _config_instance is None or reload:
        load_environment()
        _config_instance = load_config()

    return _config_instance


def get_section(section_name: str) -> Dict[str, Any]:
    """
    Get a specific section from the configuration.

    Args:
        section_name: Name of the configuration section
                      (e.g., "rekognition", "api", "client")

    Returns:
        Dict containing the section's configuration values.

    Raises:
        KeyError: If the section doesn't exist in the configuration.
    """
    config = get_config()

    if section_name not in config:
        raise KeyError(
            f"Configuration section '{section_name}' not found. "
            f"Available sections: {list(config.keys())}"
        )

    return config[section_name]


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def get_rekognition_settings() -> RekognitionSettings:
    """
    Build the Rekognition settings struct from config.yaml and the environment.

    Returns:
        RekognitionSettings with region, collection and credentials resolved.
    """
    section = get_section("rekognition")

    region = _env("AWS_REGION") or _env("AWS_DEFAULT_REGION") or section.get("region")
    if not region:
        raise KeyError("No AWS region configured (set AWS_REGION or rekognition.region)")

    return RekognitionSettings(
        region=region,
        collection_id=_env("REKOGNITION_COLLECTION_ID") or section["collection_id"],
        face_match_threshold=float(section.get("face_match_threshold", 90)),
        max_faces=int(section.get("max_faces", 1)),
        credentials=AWSCredentials(
            access_key_id=_env("AWS_ACCESS_KEY_ID"),
            secret_access_key=_env("AWS_SECRET_ACCESS_KEY"),
            session_token=_env("AWS_SESSION_TOKEN"),
        ),
    )


def get_api_config() -> Dict[str, Any]:
    """Get API configuration."""
    return get_section("api")


def get_server_config() -> Dict[str, Any]:
    """
    Get server configuration for the API.

    The PORT environment variable wins over api.port.

    Returns:
        Dict with host, port, max_body_bytes and cors_origins.
    """
    api_config = get_api_config()

    port = api_config.get("port", DEFAULT_PORT)
    port_env = _env("PORT")
    if port_env is not None:
        try:
            port = int(port_env)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_env!r}") from None

    cors_origins: List[str] = api_config.get("cors_origins") or ["*"]

    return {
        "host": api_config.get("host", "0.0.0.0"),
        "port": int(port),
        "max_body_bytes": int(api_config.get("max_body_bytes", DEFAULT_MAX_BODY_BYTES)),
        "cors_origins": cors_origins,
    }


def get_client_config() -> Dict[str, Any]:
    """Get capture client configuration (endpoint URL and timeout)."""
    return get_section("client")


def get_camera_config() -> Dict[str, Any]:
    """Get camera device configuration."""
    return get_section("camera")


def get_frontend_config() -> Dict[str, Any]:
    """Get Gradio frontend configuration."""
    return get_section("frontend")
