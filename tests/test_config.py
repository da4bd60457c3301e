from pathlib import Path

from config import ViewerConfig
from waveplot.row_window import RenderMode


def test_viewer_config_defaults(tmp_path: Path):
    ini_path = tmp_path / "missing.ini"
    cfg = ViewerConfig.load(ini_path)
    assert cfg.channel_config == "ChannelConfig.json"
    assert cfg.mode is RenderMode.SINGLE
    assert cfg.overlay_count == 5
    assert cfg.channel_config_path() == tmp_path / "ChannelConfig.json"


def test_viewer_config_parse(tmp_path: Path):
    ini_path = tmp_path / "config.ini"
    ini_path.write_text(
        """
[files]
channel_config = /data/rig/ChannelConfig.json
last_directory = /data/runs

[view]
mode = Overlay
overlay_count = 40

[window]
width = 800
height = -1
""".strip()
    )

    cfg = ViewerConfig.load(ini_path)
    assert cfg.channel_config_path() == Path("/data/rig/ChannelConfig.json")
    assert cfg.last_directory == "/data/runs"
    assert cfg.mode is RenderMode.OVERLAY
    assert cfg.overlay_count == 20
    assert cfg.window_width == 800
    assert cfg.window_height == 900


def test_viewer_config_ignores_bad_values(tmp_path: Path):
    ini_path = tmp_path / "config.ini"
    ini_path.write_text("[view]\nmode = stacked\noverlay_count = many\n")
    cfg = ViewerConfig.load(ini_path)
    assert cfg.mode is RenderMode.SINGLE
    assert cfg.overlay_count == 5


def test_viewer_config_save(tmp_path: Path):
    ini_path = tmp_path / "config.ini"
    cfg = ViewerConfig.load(ini_path)
    cfg.mode = RenderMode.OVERLAY
    cfg.overlay_count = 3
    cfg.save()

    written = ini_path.read_text()
    assert "mode = overlay" in written
    assert "overlay_count = 3" in written

    reloaded = ViewerConfig.load(ini_path)
    assert reloaded.mode is RenderMode.OVERLAY
    assert reloaded.overlay_count == 3
