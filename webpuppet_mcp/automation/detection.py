"""Detection of installed Chromium-family browsers.

BrowserDetector probes well-known install locations for the current
platform, then PATH, for Brave, Chrome, Chromium and Edge. Setting
MCP_BROWSER_BINARY skips probing and reports that binary alone.

Example:
    detector = BrowserDetector()
    for browser in detector.detect_all():
        print(browser.browser_type, browser.version, browser.list_profiles())
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

BINARY_ENV_VAR = "MCP_BROWSER_BINARY"
VERSION_TIMEOUT = 5.0

_VERSION_PATTERN = re.compile(r"(\d+(?:\.\d+)+)")
_PROFILE_PATTERN = re.compile(r"^Profile \d+$")


class BrowserType(Enum):
    BRAVE = "Brave"
    CHROME = "Chrome"
    CHROMIUM = "Chromium"
    EDGE = "Edge"

    def __str__(self) -> str:
        return self.value


# Probe order: first match per type wins
_CANDIDATES: dict[str, dict[BrowserType, list[str]]] = {
    "linux": {
        BrowserType.BRAVE: [
            "/usr/bin/brave-browser",
            "/usr/bin/brave",
            "/opt/brave.com/brave/brave",
            "/snap/bin/brave",
        ],
        BrowserType.CHROME: [
            "/usr/bin/google-chrome",
            "/usr/bin/google-chrome-stable",
            "/opt/google/chrome/chrome",
        ],
        BrowserType.CHROMIUM: [
            "/usr/bin/chromium",
            "/usr/bin/chromium-browser",
            "/usr/local/bin/chromium",
            "/snap/bin/chromium",
        ],
        BrowserType.EDGE: [
            "/usr/bin/microsoft-edge",
            "/usr/bin/microsoft-edge-stable",
            "/opt/microsoft/msedge/msedge",
        ],
    },
    "darwin": {
        BrowserType.BRAVE: ["/Applications/Brave Browser.app/Contents/MacOS/Brave Browser"],
        BrowserType.CHROME: ["/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"],
        BrowserType.CHROMIUM: ["/Applications/Chromium.app/Contents/MacOS/Chromium"],
        BrowserType.EDGE: ["/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge"],
    },
    "win32": {
        BrowserType.BRAVE: [
            "C:\\Program Files\\BraveSoftware\\Brave-Browser\\Application\\brave.exe",
            "C:\\Program Files (x86)\\BraveSoftware\\Brave-Browser\\Application\\brave.exe",
        ],
        BrowserType.CHROME: [
            "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
            "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
        ],
        BrowserType.CHROMIUM: [
            "C:\\Program Files\\Chromium\\Application\\chrome.exe",
        ],
        BrowserType.EDGE: [
            "C:\\Program Files (x86)\\Microsoft\\Edge\\Application\\msedge.exe",
            "C:\\Program Files\\Microsoft\\Edge\\Application\\msedge.exe",
        ],
    },
}

_PATH_NAMES: dict[BrowserType, list[str]] = {
    BrowserType.BRAVE: ["brave-browser", "brave"],
    BrowserType.CHROME: ["google-chrome", "google-chrome-stable", "chrome"],
    BrowserType.CHROMIUM: ["chromium", "chromium-browser"],
    BrowserType.EDGE: ["microsoft-edge", "msedge"],
}

# User data directory relative to the platform's config root
_DATA_DIRS: dict[str, dict[BrowserType, str]] = {
    "linux": {
        BrowserType.BRAVE: "BraveSoftware/Brave-Browser",
        BrowserType.CHROME: "google-chrome",
        BrowserType.CHROMIUM: "chromium",
        BrowserType.EDGE: "microsoft-edge",
    },
    "darwin": {
        BrowserType.BRAVE: "BraveSoftware/Brave-Browser",
        BrowserType.CHROME: "Google/Chrome",
        BrowserType.CHROMIUM: "Chromium",
        BrowserType.EDGE: "Microsoft Edge",
    },
    "win32": {
        BrowserType.BRAVE: "BraveSoftware/Brave-Browser/User Data",
        BrowserType.CHROME: "Google/Chrome/User Data",
        BrowserType.CHROMIUM: "Chromium/User Data",
        BrowserType.EDGE: "Microsoft/Edge/User Data",
    },
}


def _platform_key(platform: str) -> str:
    if platform.startswith("win"):
        return "win32"
    if platform == "darwin":
        return "darwin"
    return "linux"


@dataclass(frozen=True)
class DetectedBrowser:
    """An installed browser usable for automation.

    Attributes:
        browser_type: Browser family.
        executable_path: Path to the browser binary.
        user_data_dir: Directory holding the browser's profiles.
        version: Version string reported by --version, if readable.
    """

    browser_type: BrowserType
    executable_path: Path
    user_data_dir: Path
    version: str | None = None

    def list_profiles(self) -> list[str]:
        """Return profile directory names ("Default", "Profile 1", ...) that exist."""
        if not self.user_data_dir.is_dir():
            return []
        try:
            entries = list(self.user_data_dir.iterdir())
        except OSError as e:
            logger.debug("Cannot list profiles in %s: %s", self.user_data_dir, e)
            return []

        names = [
            entry.name
            for entry in entries
            if entry.is_dir() and (entry.name == "Default" or _PROFILE_PATTERN.match(entry.name))
        ]
        # Default first, then numeric order
        return sorted(
            names,
            key=lambda n: (n != "Default", int(n.split()[-1]) if n != "Default" else 0),
        )


class BrowserDetector:
    """Finds installed Chromium-family browsers.

    Args:
        platform: Platform key (defaults to sys.platform).
        env: Environment mapping (defaults to os.environ).
        home: Home directory (defaults to Path.home()).
    """

    def __init__(
        self,
        platform: str | None = None,
        env: Mapping[str, str] | None = None,
        home: Path | None = None,
    ) -> None:
        self._platform = _platform_key(platform or sys.platform)
        self._env = env if env is not None else os.environ
        self._home = home

    def detect_all(self) -> list[DetectedBrowser]:
        """Detect every supported browser, at most one per type."""
        override = self._env.get(BINARY_ENV_VAR)
        if override:
            path = Path(override).expanduser()
            browser_type = self._guess_type(path)
            logger.debug("Using %s=%s (%s)", BINARY_ENV_VAR, path, browser_type)
            return [self._describe(browser_type, path)]

        found: list[DetectedBrowser] = []
        for browser_type in BrowserType:
            path = self._find_executable(browser_type)
            if path is not None:
                found.append(self._describe(browser_type, path))
        logger.debug("Detected %d browser(s)", len(found))
        return found

    def detect_first(self) -> DetectedBrowser | None:
        """Return the preferred browser (first detected), or None."""
        browsers = self.detect_all()
        return browsers[0] if browsers else None

    def _find_executable(self, browser_type: BrowserType) -> Path | None:
        for candidate in _CANDIDATES[self._platform][browser_type]:
            path = Path(candidate)
            if path.is_file() and os.access(path, os.X_OK):
                return path
        for name in _PATH_NAMES[browser_type]:
            resolved = shutil.which(name, path=self._env.get("PATH"))
            if resolved:
                return Path(resolved)
        return None

    def _describe(self, browser_type: BrowserType, path: Path) -> DetectedBrowser:
        return DetectedBrowser(
            browser_type=browser_type,
            executable_path=path,
            user_data_dir=self._user_data_dir(browser_type),
            version=read_browser_version(path),
        )

    def _config_root(self) -> Path:
        home = self._home or Path.home()
        if self._platform == "darwin":
            return home / "Library" / "Application Support"
        if self._platform == "win32":
            local = self._env.get("LOCALAPPDATA")
            return Path(local) if local else home / "AppData" / "Local"
        xdg = self._env.get("XDG_CONFIG_HOME")
        return Path(xdg) if xdg else home / ".config"

    def _user_data_dir(self, browser_type: BrowserType) -> Path:
        return self._config_root() / _DATA_DIRS[self._platform][browser_type]

    @staticmethod
    def _guess_type(path: Path) -> BrowserType:
        name = path.name.lower()
        if "brave" in name:
            return BrowserType.BRAVE
        if "edge" in name:
            return BrowserType.EDGE
        if "chromium" in name:
            return BrowserType.CHROMIUM
        return BrowserType.CHROME


def read_browser_version(path: Path, timeout: float = VERSION_TIMEOUT) -> str | None:
    """Run `<browser> --version` and extract the dotted version number."""
    try:
        completed = subprocess.run(
            [str(path), "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not read version of %s: %s", path, e)
        return None

    match = _VERSION_PATTERN.search(completed.stdout or "")
    return match.group(1) if match else None
