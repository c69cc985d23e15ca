"""Launcher configuration model and JSON loader.

Stores grid shape, cell styling, behavior flags, and the ordered app list.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "appshelf"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridSpec:
    rows: int = 1
    columns: int = 5

    @property
    def degenerate(self) -> bool:
        return self.rows <= 0 or self.columns <= 0


@dataclass(frozen=True)
class StyleSpec:
    border: bool = True
    padding: int = 1


@dataclass(frozen=True)
class BehaviorSpec:
    """Session behavior flags.

    ``reflow_on_resize`` selects the resize policy: when false, every window
    size report after the first is ignored (soft keyboards resize the
    terminal constantly); when true, each report re-derives geometry.
    """

    close_on_launch: bool = False
    reflow_on_resize: bool = False


@dataclass(frozen=True)
class AppEntry:
    name: str
    package: str
    icon: str = ""
    activity: str = ""
    icon_scale: float = 1.0


@dataclass(frozen=True)
class ShelfConfig:
    grid: GridSpec = field(default_factory=GridSpec)
    style: StyleSpec = field(default_factory=StyleSpec)
    behavior: BehaviorSpec = field(default_factory=BehaviorSpec)
    apps: tuple[AppEntry, ...] = ()

    def display_apps(self) -> tuple[AppEntry, ...]:
        """Return apps in display order, which is configuration order."""
        return self.apps

    def icon_scale(self, app: AppEntry) -> float:
        return app.icon_scale if app.icon_scale > 0 else 1.0


def _coerce_bool(value: object, default: bool) -> bool:
    """Accept only real JSON booleans; anything else keeps ``default``."""
    return value if isinstance(value, bool) else default


def _coerce_int(value: object, default: int) -> int:
    """Normalize JSON integers; booleans and floats are rejected.

    Negative values are kept so a degenerate grid stays degenerate rather than
    silently becoming a valid one.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _coerce_nonnegative_int(value: object, default: int) -> int:
    return max(0, _coerce_int(value, default))


def _coerce_scale(value: object) -> float:
    """Accept finite positive numbers; JSON also admits ``Infinity`` and ``NaN``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 1.0
    try:
        scale = float(value)
    except OverflowError:
        return 1.0
    return scale if math.isfinite(scale) and scale > 0 else 1.0


def _coerce_str(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _section(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_app(raw: object) -> AppEntry | None:
    """Build one ``AppEntry``; entries without a package are dropped."""
    if not isinstance(raw, dict):
        return None
    package = _coerce_str(raw.get("package"))
    if not package:
        return None
    return AppEntry(
        name=_coerce_str(raw.get("name")) or package,
        package=package,
        icon=_coerce_str(raw.get("icon")),
        activity=_coerce_str(raw.get("activity")),
        icon_scale=_coerce_scale(raw.get("icon_scale", 1.0)),
    )


def parse_config(data: dict[str, object]) -> ShelfConfig:
    """Convert a decoded JSON object into a normalized ``ShelfConfig``."""
    defaults = ShelfConfig()
    grid = _section(data, "grid")
    style = _section(data, "style")
    behavior = _section(data, "behavior")

    raw_apps = data.get("apps")
    apps: list[AppEntry] = []
    if isinstance(raw_apps, list):
        for position, raw in enumerate(raw_apps):
            app = parse_app(raw)
            if app is None:
                logger.warning("dropping app entry %d: missing package", position)
                continue
            apps.append(app)

    return ShelfConfig(
        grid=GridSpec(
            rows=_coerce_int(grid.get("rows"), defaults.grid.rows),
            columns=_coerce_int(grid.get("columns"), defaults.grid.columns),
        ),
        style=StyleSpec(
            border=_coerce_bool(style.get("border"), defaults.style.border),
            padding=_coerce_nonnegative_int(style.get("padding"), defaults.style.padding),
        ),
        behavior=BehaviorSpec(
            close_on_launch=_coerce_bool(
                behavior.get("close_on_launch"), defaults.behavior.close_on_launch
            ),
            reflow_on_resize=_coerce_bool(
                behavior.get("reflow_on_resize"), defaults.behavior.reflow_on_resize
            ),
        ),
        apps=tuple(apps),
    )


def load_raw_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("no config at %s, using defaults", config_path)
        return {}
    except OSError as exc:
        logger.warning("cannot read config %s: %s", config_path, exc)
        return {}
    try:
        data = json.loads(text)
    except ValueError as exc:
        logger.warning("malformed config %s: %s", config_path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("config %s is not a JSON object", config_path)
        return {}
    return data


def load_config(path: Path | None = None) -> ShelfConfig:
    return parse_config(load_raw_config(path))


def default_config_document() -> dict[str, object]:
    """Return the default configuration as a JSON-ready dict."""
    defaults = ShelfConfig()
    return {
        "grid": {"rows": defaults.grid.rows, "columns": defaults.grid.columns},
        "style": {"border": defaults.style.border, "padding": defaults.style.padding},
        "behavior": {
            "close_on_launch": defaults.behavior.close_on_launch,
            "reflow_on_resize": defaults.behavior.reflow_on_resize,
        },
        "apps": [],
    }


def save_default_config(path: Path | None = None) -> Path:
    """Write the default config document unless a file already exists."""
    config_path = CONFIG_PATH if path is None else path
    if config_path.exists():
        return config_path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(default_config_document(), indent=2) + "\n", encoding="utf-8")
    return config_path
