from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from waveplot.config_store import CONFIG_FILE_NAME
from waveplot.row_window import DEFAULT_OVERLAY_COUNT, RenderMode, clamp_overlay_count


@dataclass
class ViewerConfig:
    channel_config: str = CONFIG_FILE_NAME
    last_directory: str = ""
    mode: RenderMode = RenderMode.SINGLE
    overlay_count: int = DEFAULT_OVERLAY_COUNT
    window_width: int = 1400
    window_height: int = 900
    ini_path: Path | None = None

    @classmethod
    def load(cls, ini_path: str | Path | None = None) -> "ViewerConfig":
        cfg = cls()
        path = Path(ini_path or "waveplot.ini")
        if path.exists():
            import configparser

            parser = configparser.ConfigParser(interpolation=None)
            parser.read(path)
            files_section = parser["files"] if "files" in parser else None
            if files_section:
                channel_config = files_section.get("channel_config", fallback="").strip()
                if channel_config:
                    cfg.channel_config = channel_config
                cfg.last_directory = files_section.get(
                    "last_directory", fallback=cfg.last_directory
                ).strip()

            view_section = parser["view"] if "view" in parser else None
            if view_section:
                mode_raw = view_section.get("mode", fallback=cfg.mode.value).strip().lower()
                try:
                    cfg.mode = RenderMode(mode_raw)
                except ValueError:
                    pass
                try:
                    overlay = view_section.getint("overlay_count", fallback=cfg.overlay_count)
                except ValueError:
                    overlay = cfg.overlay_count
                cfg.overlay_count = clamp_overlay_count(overlay)

            window_section = parser["window"] if "window" in parser else None
            if window_section:
                for attr, key in (("window_width", "width"), ("window_height", "height")):
                    try:
                        value = window_section.getint(key, fallback=getattr(cfg, attr))
                    except ValueError:
                        continue
                    if value > 0:
                        setattr(cfg, attr, value)
        cfg.ini_path = path
        return cfg

    def channel_config_path(self) -> Path:
        """Channel config path; relative paths resolve next to the INI file."""
        path = Path(self.channel_config)
        if not path.is_absolute() and self.ini_path is not None:
            path = self.ini_path.parent / path
        return path

    def save(self) -> None:
        if self.ini_path is None:
            return
        import configparser

        parser = configparser.ConfigParser(interpolation=None)
        parser["files"] = {
            "channel_config": self.channel_config,
            "last_directory": self.last_directory,
        }
        parser["view"] = {
            "mode": RenderMode(self.mode).value,
            "overlay_count": str(clamp_overlay_count(self.overlay_count)),
        }
        parser["window"] = {
            "width": str(self.window_width),
            "height": str(self.window_height),
        }
        with self.ini_path.open("w") as fh:
            parser.write(fh)
