"""
Persistent Settings

Description: Scraper configuration with built-in defaults and an optional JSON settings file
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

STEALTH_LEVELS = ("basic", "enhanced", "extreme")
DIRECTORY_MODES = ("crawl", "api")

DEFAULT_CHALLENGE_SELECTORS = [
    'iframe[src*="recaptcha"]',
    'iframe[src*="hcaptcha"]',
    'iframe[src*="challenges.cloudflare.com"]',
]


@dataclass
class DirectorySettings:
    """Selectors and pacing for the broker directory crawl."""

    domains: List[str] = field(default_factory=lambda: ["ibba.org"])
    mode: str = "crawl"
    listing_url: str = "https://www.ibba.org/find-a-business-broker/"
    api_url: str = "https://www.ibba.org/wp-json/brokers/all"
    anchor_selector: str = "#broker-search"
    location_selector: str = "input[name='location']"
    location: str = ""
    submit_selector: str = "button[type='submit']"
    load_more_selector: str = "button.load-more"
    settle_ms: int = 2000
    # 0 disables the ceiling
    max_load_more: int = 500
    profile_link_selector: str = "a.broker-profile-link"
    firm_selector: str = ".broker-company"
    contact_selector: str = ".broker-name"
    email_selector: str = "a[href^='mailto:']"
    profile_delay_ms: int = 0

    def __post_init__(self):
        if self.mode not in DIRECTORY_MODES:
            raise ValueError(f"Unknown directory mode {self.mode!r}, expected one of {DIRECTORY_MODES}")
        if self.max_load_more < 0:
            raise ValueError("max_load_more cannot be negative")


@dataclass
class ScraperSettings:
    """
    Every tunable used by the retrieval paths.

    Values come from the defaults below, optionally overlaid by a JSON file
    (see load_settings) and then by explicit overrides such as CLI flags.
    """

    user_agent: str = DESKTOP_USER_AGENT
    request_timeout: float = 30.0
    headless: bool = False
    stealth_level: str = "enhanced"
    use_persistent_profile: bool = True
    cookie_file: str = "cookies.json"
    debug_dir: str = "debug"
    output_dir: str = "output"
    navigation_timeout_ms: int = 60000
    element_timeout_ms: int = 30000
    challenge_timeout_ms: int = 30000
    challenge_grace_ms: int = 20000
    challenge_selectors: List[str] = field(default_factory=lambda: list(DEFAULT_CHALLENGE_SELECTORS))
    human_scroll_step_px: int = 400
    human_max_scroll_steps: int = 25
    human_delay_ms: Tuple[int, int] = (150, 450)
    dynamic_only_domains: List[str] = field(default_factory=lambda: ["ibba.org"])
    directory: DirectorySettings = field(default_factory=DirectorySettings)

    def __post_init__(self):
        if self.stealth_level not in STEALTH_LEVELS:
            raise ValueError(f"Unknown stealth level {self.stealth_level!r}, expected one of {STEALTH_LEVELS}")
        self.human_delay_ms = tuple(self.human_delay_ms)
        if len(self.human_delay_ms) != 2 or self.human_delay_ms[0] > self.human_delay_ms[1]:
            raise ValueError("human_delay_ms must be a [min, max] pair")
        if isinstance(self.directory, dict):
            self.directory = DirectorySettings(**self.directory)

    def with_overrides(self, directory: Optional[Dict[str, Any]] = None, **kwargs) -> "ScraperSettings":
        """
        Copy of these settings with some values replaced.

        None values are ignored so optional CLI flags can be passed straight
        through. ``directory`` is a dict merged into the directory section.
        """
        changes = {key: value for key, value in kwargs.items() if value is not None}
        if directory:
            directory_changes = {key: value for key, value in directory.items() if value is not None}
            changes["directory"] = replace(self.directory, **directory_changes)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["human_delay_ms"] = list(self.human_delay_ms)
        return data


def _merge_section(target: Dict[str, Any], loaded: Dict[str, Any], known: set, section: str) -> None:
    for key, value in loaded.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{section}{key}'")
            continue
        target[key] = value


def load_settings(path: Optional[Union[str, Path]] = None) -> ScraperSettings:
    """
    Build settings from the defaults and an optional JSON file.

    The file only needs the keys it wants to change; the ``directory``
    section is merged key by key as well. A missing file falls back to the
    defaults with a warning, a malformed one raises ValueError.

    Args:
        path: Location of the JSON settings file, or None for pure defaults

    Returns:
        ScraperSettings
    """
    if path is None:
        return ScraperSettings()

    settings_file = Path(path)
    if not settings_file.exists():
        logger.warning(f"Settings file {settings_file} not found, using defaults")
        return ScraperSettings()

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Settings file {settings_file} is not valid JSON: {e}") from e

    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file {settings_file} must contain a JSON object")

    defaults = ScraperSettings().to_dict()
    top_level = {f.name for f in fields(ScraperSettings)}
    directory_keys = {f.name for f in fields(DirectorySettings)}

    directory_loaded = loaded.pop("directory", None) or {}
    if not isinstance(directory_loaded, dict):
        raise ValueError("The 'directory' setting must be a JSON object")

    merged = dict(defaults)
    _merge_section(merged, loaded, top_level - {"directory"}, "")
    merged_directory = dict(defaults["directory"])
    _merge_section(merged_directory, directory_loaded, directory_keys, "directory.")
    merged["directory"] = DirectorySettings(**merged_directory)

    logger.info(f"Loaded settings from {settings_file}")
    return ScraperSettings(**merged)


def save_settings(settings: ScraperSettings, path: Union[str, Path]) -> Path:
    """Write settings as JSON, creating parent directories as needed."""
    settings_file = Path(path)
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_file, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=4)
    return settings_file
