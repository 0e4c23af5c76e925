import json
import os
import sys
from typing import Any, Dict, Optional

from colored_logger import get_colored_logger
from post_query import InvalidArgument, SortOrder, TagMatchPolicy

logger = get_colored_logger(__name__)

ENV_PREFIX = "POST_QUERY_"


def _load_env_file(env_path: str) -> None:
    """
    Simple .env file parser that doesn't require external dependencies.
    Loads key=value pairs from .env file into os.environ.
    """
    if not os.path.isfile(env_path):
        return

    try:
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()

                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                if (value.startswith('"') and value.endswith('"')) or (
                    value.startswith("'") and value.endswith("'")
                ):
                    value = value[1:-1]

                # .env file takes precedence over system environment variables
                if key:
                    os.environ[key] = value

        logger.debug(".env file loaded from %s", env_path)

    except OSError as e:
        logger.warning("Failed to load .env file: %s", e)


_env_file_paths = [".env", "../.env"]
for _env_path in _env_file_paths:
    if os.path.isfile(_env_path):
        _load_env_file(_env_path)
        break


class Settings:
    """
    Loads query settings from a JSON file (by default none, i.e. all defaults),
    then applies POST_QUERY_* environment overrides.
    """

    DEFAULTS: Dict[str, Any] = {
        "version": "1.0.0",
        "posts_source": "",
        "tag_match_policy": TagMatchPolicy.ANY.value,
        "default_sort_order": SortOrder.NEWEST.value,
        "description_preview_length": 150,
        "max_tags_shown": 3,
        "request_timeout_seconds": 30,
        "log_level": "INFO",
    }

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        Loads settings from the specified file, then populates instance variables.
        Exits the program if a file was named but is missing or invalid.

        :param settings_file: Path to `settings.json`. None means defaults only.
        """
        self.raw: Dict[str, Any] = {}

        if settings_file is not None:
            if not os.path.isfile(settings_file):
                logger.critical(
                    "settings.json not found at '%s'. Exiting...", settings_file
                )
                sys.exit(1)

            loaded = self._load_json(settings_file)
            if not isinstance(loaded, dict):
                logger.critical(
                    "settings.json appears to be empty or invalid. Exiting..."
                )
                sys.exit(1)
            self.raw = loaded

        self.version: str = self._get("version")
        self.posts_source: str = os.environ.get(
            ENV_PREFIX + "POSTS_SOURCE", self._get("posts_source")
        )
        self.log_level: str = os.environ.get(
            ENV_PREFIX + "LOG_LEVEL", self._get("log_level")
        )

        # Query behavior
        self.tag_match_policy: TagMatchPolicy = self._parse_enum(
            TagMatchPolicy,
            os.environ.get(
                ENV_PREFIX + "TAG_MATCH_POLICY", self._get("tag_match_policy")
            ),
            "tag_match_policy",
        )
        self.default_sort_order: SortOrder = self._parse_enum(
            SortOrder, self._get("default_sort_order"), "default_sort_order"
        )

        # Display and loading
        self.description_preview_length: int = self._get_positive_int(
            "description_preview_length"
        )
        self.max_tags_shown: int = self._get_positive_int("max_tags_shown")
        self.request_timeout_seconds: int = self._get_positive_int(
            "request_timeout_seconds"
        )

        if settings_file is not None:
            logger.info("Settings loaded from '%s'.", settings_file)

    def _get(self, key: str) -> Any:
        return self.raw.get(key, self.DEFAULTS[key])

    def _get_positive_int(self, key: str) -> int:
        value = self._get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            logger.warning(
                "Invalid %s value %r, using default %d",
                key,
                value,
                self.DEFAULTS[key],
            )
            return self.DEFAULTS[key]
        return value

    def _parse_enum(self, enum_cls, value: Any, key: str):
        try:
            return enum_cls.parse(value)
        except InvalidArgument:
            logger.warning(
                "Invalid %s value %r, using default '%s'",
                key,
                value,
                self.DEFAULTS[key],
            )
            return enum_cls.parse(self.DEFAULTS[key])

    def _load_json(self, path: str) -> Any:
        """
        Loads JSON from the given file path.

        :param path: The path to the JSON file.
        :return: The parsed JSON (dictionary or list) if valid, otherwise None.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Error loading JSON file '%s': %s", path, e)
            return None
