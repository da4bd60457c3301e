# ui/main_window.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pyqtgraph as pg
from PySide6 import QtCore, QtWidgets

from config import ViewerConfig
from ui.chart_backend import PyqtgraphChartBackend
from waveplot.channel_set import ChannelChange
from waveplot.csv_loader import parse_number
from waveplot.errors import InvalidIntervalError, NoChannelsError
from waveplot.row_window import RenderMode, step_row
from waveplot.session import WaveformSession
from waveplot.timebase import format_interval
from waveplot.transform import RenderResult

LOG = logging.getLogger(__name__)

GRID_WIDTH = 460

# Grid columns: 0=Name, 1=Ch1, 2=Ch2, 3=Bias, 4=Scale
COL_NAME, COL_PRIMARY, COL_SECONDARY, COL_BIAS, COL_SCALE = range(5)
GRID_HEADERS = ("Channel", "Ch1", "Ch2", "Bias", "Scale")


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, session: WaveformSession, *, config: ViewerConfig | None = None):
        super().__init__()
        self.session = session
        self.config = config or ViewerConfig()
        self.last_result: RenderResult | None = None
        self._populating = False
        self._unsubscribe = None
        self.setWindowTitle("Waveform Plotter")
        self._build_ui()
        self._connect_signals()
        self.interval_edit.setText(format_interval(self.session.sample_interval_s))

    def _build_ui(self):
        self.load_button = QtWidgets.QPushButton("Load CSVs")
        self.plot_button = QtWidgets.QPushButton("Plot")
        self.save_button = QtWidgets.QPushButton("Save Config")
        self.interval_edit = QtWidgets.QLineEdit()
        self.interval_edit.setFixedWidth(80)
        self.single_radio = QtWidgets.QRadioButton("Single Row")
        self.overlay_radio = QtWidgets.QRadioButton("Overlay Rows")
        if self.config.mode is RenderMode.OVERLAY:
            self.overlay_radio.setChecked(True)
        else:
            self.single_radio.setChecked(True)
        self.row_spin = QtWidgets.QSpinBox()
        self.row_spin.setRange(0, 0)
        self.overlay_spin = QtWidgets.QSpinBox()
        self.overlay_spin.setRange(1, 20)
        self.overlay_spin.setValue(self.config.overlay_count)
        self.prev_button = QtWidgets.QPushButton("<")
        self.next_button = QtWidgets.QPushButton(">")

        controls = QtWidgets.QHBoxLayout()
        for widget in (self.load_button, self.plot_button, self.save_button):
            controls.addWidget(widget)
        controls.addWidget(QtWidgets.QLabel("Sample dt (s):"))
        controls.addWidget(self.interval_edit)
        mode_box = QtWidgets.QVBoxLayout()
        mode_box.addWidget(self.single_radio)
        mode_box.addWidget(self.overlay_radio)
        controls.addLayout(mode_box)
        controls.addWidget(QtWidgets.QLabel("Row:"))
        controls.addWidget(self.row_spin)
        controls.addWidget(QtWidgets.QLabel("# overlays:"))
        controls.addWidget(self.overlay_spin)
        controls.addWidget(self.prev_button)
        controls.addWidget(self.next_button)
        controls.addStretch(1)

        self.grid = QtWidgets.QTableWidget(0, len(GRID_HEADERS))
        self.grid.setHorizontalHeaderLabels(list(GRID_HEADERS))
        self.grid.setFixedWidth(GRID_WIDTH)
        self.grid.verticalHeader().setVisible(False)

        self.top_plot = pg.PlotWidget()
        self.bottom_plot = pg.PlotWidget()
        self.bottom_plot.setXLink(self.top_plot)
        self.top_chart = PyqtgraphChartBackend(self.top_plot)
        self.bottom_chart = PyqtgraphChartBackend(self.bottom_plot)

        charts = QtWidgets.QVBoxLayout()
        charts.addLayout(controls)
        charts.addWidget(self.top_plot, 1)
        charts.addWidget(self.bottom_plot, 1)

        layout = QtWidgets.QHBoxLayout()
        layout.addWidget(self.grid)
        layout.addLayout(charts, 1)
        central = QtWidgets.QWidget()
        central.setLayout(layout)
        self.setCentralWidget(central)

    def _connect_signals(self):
        self.load_button.clicked.connect(self._prompt_open_files)
        self.plot_button.clicked.connect(self.plot_from_ui)
        self.save_button.clicked.connect(self.save_current_config)
        self.prev_button.clicked.connect(lambda: self.step_rows(-1))
        self.next_button.clicked.connect(lambda: self.step_rows(+1))
        self.grid.itemChanged.connect(self._on_grid_item_changed)
        self.top_chart.set_double_click_handler(self._autoscale_charts)
        self.bottom_chart.set_double_click_handler(self._autoscale_charts)

    # ----- state -----

    def current_mode(self) -> RenderMode:
        return RenderMode.SINGLE if self.single_radio.isChecked() else RenderMode.OVERLAY

    def _warn(self, title: str, message: str) -> None:
        LOG.warning("%s: %s", title, message)
        QtWidgets.QMessageBox.warning(self, title, message)

    # ----- loading -----

    def _prompt_open_files(self):
        paths, _ = QtWidgets.QFileDialog.getOpenFileNames(
            self,
            "Select CSV files (one per channel)",
            self.config.last_directory,
            "CSV files (*.csv);;All files (*.*)",
        )
        if paths:
            self.config.last_directory = str(Path(paths[0]).parent)
            self.load_files(paths, interactive=True)

    def load_files(self, paths: Sequence[str], *, interactive: bool = False) -> list[str]:
        warnings = self.session.load_channels(paths)
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = self.session.channel_set.subscribe(self._on_channel_changed)
        self.last_result = None
        self.populate_grid()
        row_count = self.session.channel_set.row_count
        self.row_spin.setRange(0, max(0, row_count - 1))
        if interactive and warnings:
            self._warn("Warning", "\n".join(warnings))
        return warnings

    def populate_grid(self):
        self._populating = True
        try:
            channels = self.session.channel_set.channels
            self.grid.setRowCount(len(channels))
            for row, channel in enumerate(channels):
                name_item = QtWidgets.QTableWidgetItem(channel.name)
                name_item.setFlags(name_item.flags() & ~QtCore.Qt.ItemIsEditable)
                self.grid.setItem(row, COL_NAME, name_item)
                for col, checked in (
                    (COL_PRIMARY, channel.show_on_primary),
                    (COL_SECONDARY, channel.show_on_secondary),
                ):
                    item = QtWidgets.QTableWidgetItem()
                    item.setFlags(QtCore.Qt.ItemIsUserCheckable | QtCore.Qt.ItemIsEnabled)
                    item.setCheckState(QtCore.Qt.Checked if checked else QtCore.Qt.Unchecked)
                    self.grid.setItem(row, col, item)
                self.grid.setItem(row, COL_BIAS, QtWidgets.QTableWidgetItem(repr(channel.bias)))
                self.grid.setItem(row, COL_SCALE, QtWidgets.QTableWidgetItem(repr(channel.scale)))
        finally:
            self._populating = False

    def _on_grid_item_changed(self, item: QtWidgets.QTableWidgetItem):
        if self._populating:
            return
        row, col = item.row(), item.column()
        channel_set = self.session.channel_set
        if not 0 <= row < len(channel_set):
            return
        if col == COL_PRIMARY:
            channel_set.update_channel(row, show_on_primary=item.checkState() == QtCore.Qt.Checked)
        elif col == COL_SECONDARY:
            channel_set.update_channel(row, show_on_secondary=item.checkState() == QtCore.Qt.Checked)
        elif col in (COL_BIAS, COL_SCALE):
            value = parse_number(item.text())
            channel = channel_set[row]
            if value is None:
                self._populating = True
                try:
                    item.setText(repr(channel.bias if col == COL_BIAS else channel.scale))
                finally:
                    self._populating = False
                return
            if col == COL_BIAS:
                channel_set.update_channel(row, bias=value)
            else:
                channel_set.update_channel(row, scale=value)

    def _on_channel_changed(self, change: ChannelChange):
        if self.last_result is not None:
            self.plot_from_ui(interactive=False)

    # ----- plotting -----

    def step_rows(self, direction: int):
        if self.session.channel_set.row_count == 0:
            return
        new_row = step_row(
            self.row_spin.value(),
            direction,
            mode=self.current_mode(),
            overlay_count=self.overlay_spin.value(),
            row_count=self.session.channel_set.row_count,
        )
        self.row_spin.setValue(new_row)
        self.plot_from_ui()

    def plot_from_ui(self, *, interactive: bool = True) -> bool:
        try:
            self.session.set_sample_interval(self.interval_edit.text())
            request = self.session.request(
                self.current_mode(), self.row_spin.value(), self.overlay_spin.value()
            )
            result = self.session.render(request)
        except NoChannelsError:
            if interactive:
                self._warn("No data", "Load CSV files first.")
            return False
        except InvalidIntervalError as exc:
            if interactive:
                self._warn("Error", str(exc))
            return False
        self.last_result = result
        self.top_chart.apply_view(result.primary)
        self.bottom_chart.apply_view(result.secondary)
        self.top_chart.autoscale()
        return True

    def _autoscale_charts(self):
        self.top_chart.autoscale()
        self.bottom_chart.autoscale()

    # ----- persistence -----

    def save_current_config(self, *, interactive: bool = True) -> bool:
        try:
            self.session.save_config(self.interval_edit.text())
        except InvalidIntervalError as exc:
            if interactive:
                self._warn("Config", f"Invalid sample interval, not saved. {exc}")
            return False
        except OSError as exc:
            if interactive:
                self._warn("Config", f"Failed to save config: {exc}")
            return False
        if interactive:
            QtWidgets.QMessageBox.information(self, "Config", "Config saved.")
        return True

    def closeEvent(self, event):  # noqa: N802 - Qt override
        self.config.mode = self.current_mode()
        self.config.overlay_count = self.overlay_spin.value()
        self.config.window_width = self.width()
        self.config.window_height = self.height()
        try:
            self.config.save()
        except OSError as exc:
            LOG.warning("Failed to write viewer settings: %s", exc)
        super().closeEvent(event)
