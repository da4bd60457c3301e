# app.py
import logging
import sys

from config import ViewerConfig
from waveplot.session import WaveformSession


def main(
    paths=None,
    *,
    config_path: str | None = None,
    channel_config: str | None = None,
    overlay_count: int | None = None,
):
    from PySide6 import QtWidgets
    from ui.main_window import MainWindow

    cfg = ViewerConfig.load(config_path)
    if channel_config:
        cfg.channel_config = channel_config
    if overlay_count is not None and overlay_count > 0:
        cfg.overlay_count = overlay_count
    session = WaveformSession(cfg.channel_config_path())
    session.load_config_file()

    app = QtWidgets.QApplication(sys.argv)
    w = MainWindow(session, config=cfg)
    if paths:
        w.load_files(paths, interactive=True)
    w.resize(cfg.window_width, cfg.window_height)
    w.show()
    return app.exec()


def run():
    import argparse
    p = argparse.ArgumentParser(description="Plot per-channel CSV waveform recordings.")
    p.add_argument("csv_paths", nargs="*")
    p.add_argument("--config")
    p.add_argument("--channel-config")
    p.add_argument("--overlay-count", type=int)
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return main(
        args.csv_paths,
        config_path=args.config,
        channel_config=args.channel_config,
        overlay_count=args.overlay_count,
    )


if __name__ == "__main__":
    sys.exit(run())
