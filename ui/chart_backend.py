"""pyqtgraph rendering of prepared chart views."""

from __future__ import annotations

from typing import Callable

import pyqtgraph as pg
from PySide6 import QtCore, QtWidgets

from waveplot.transform import ChartView


class PyqtgraphChartBackend:
    """One chart: a plot with legend and a crosshair that follows the mouse."""

    def __init__(self, plot_widget: pg.PlotWidget) -> None:
        self._widget = plot_widget
        self.plot: pg.PlotItem = plot_widget.getPlotItem()
        self.plot.showGrid(x=True, y=True, alpha=0.15)
        self.plot.setMenuEnabled(False)
        self.legend = self.plot.addLegend()
        self.curves: list[pg.PlotDataItem] = []
        self._vline = pg.InfiniteLine(angle=90, movable=False, pen=pg.mkPen("#888888"))
        self._hline = pg.InfiniteLine(angle=0, movable=False, pen=pg.mkPen("#888888"))
        self.plot.addItem(self._vline, ignoreBounds=True)
        self.plot.addItem(self._hline, ignoreBounds=True)
        self._on_double_click: Callable[[], None] | None = None
        self.cursor_position: tuple[float, float] | None = None
        scene = self.plot.scene()
        scene.sigMouseMoved.connect(self._handle_mouse_moved)
        scene.sigMouseClicked.connect(self._handle_mouse_clicked)

    @property
    def widget(self) -> QtWidgets.QWidget:  # pragma: no cover - trivial
        return self._widget

    def set_double_click_handler(self, handler: Callable[[], None]) -> None:
        self._on_double_click = handler

    def clear(self) -> None:
        for curve in self.curves:
            self.plot.removeItem(curve)
        self.curves.clear()
        self.legend.clear()

    def apply_view(self, view: ChartView) -> None:
        self.clear()
        self.plot.setTitle(view.title)
        self.plot.setLabel("bottom", view.x_label)
        for series in view.series:
            curve = self.plot.plot(
                series.time,
                series.values,
                pen=pg.mkPen(series.hex_color, width=1.2),
                name=series.label,
            )
            self.curves.append(curve)

    def autoscale(self) -> None:
        self.plot.enableAutoRange()
        self.plot.autoRange()

    # Internal helpers ----------------------------------------------------
    def _handle_mouse_moved(self, pos: QtCore.QPointF) -> None:
        vb = self.plot.getViewBox()
        if not self.plot.sceneBoundingRect().contains(pos):
            return
        point = vb.mapSceneToView(pos)
        self._vline.setPos(point.x())
        self._hline.setPos(point.y())
        self.cursor_position = (float(point.x()), float(point.y()))

    def _handle_mouse_clicked(self, event) -> None:
        if not event.double() or event.button() != QtCore.Qt.LeftButton:
            return
        if self._on_double_click is not None:
            self._on_double_click()
