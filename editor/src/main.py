import sys
import os
import logging

# Configure logging
logging.basicConfig(
    level=logging.WARNING,  # Only show warnings and errors
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)  # Output to console
    ]
)

# Add editor/src to path so imports work when running directly
if __name__ == "__main__":
    current_dir = os.path.dirname(os.path.abspath(__file__))
    if current_dir not in sys.path:
        sys.path.insert(0, current_dir)

# PyQt5 import/s
from PyQt5 import QtWidgets
from PyQt5.QtWidgets import QMainWindow, QLabel
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPalette, QColor

from components.transform_overlay import TransformOverlay
from models.geometry import PointGeometry, RingGeometry
from models.options import TransformOptions
from models.shape import Shape
from models.transform import LatLng
from services.projection import MapView, SimpleProjection
from utils.logger import loggerRaise, set_main_window


class TransformDemoWindow(QMainWindow):
    """Map window with a few transformable shapes"""

    def __init__(self, options=None):
        super().__init__()
        self.setWindowTitle("Map Path Transform")
        self.resize(800, 600)

        self.map_view = MapView(SimpleProjection(), zoom=2, max_zoom=4)
        self.overlay = TransformOverlay(self.map_view, self)
        self.setCentralWidget(self.overlay)

        self.status_label = QLabel("Drag a corner to scale, an outer handle to rotate")
        self.statusBar().addWidget(self.status_label)

        self.overlay.transformEnded.connect(self._on_transform_ended)
        self._add_sample_shapes(options)

    def _add_sample_shapes(self, options):
        polygon = RingGeometry([[
            LatLng(-10, 20), LatLng(-10, 60), LatLng(-35, 60), LatLng(-35, 20)
        ]])
        line = RingGeometry([[
            LatLng(-60, 20), LatLng(-80, 45), LatLng(-60, 70), LatLng(-80, 95)
        ]], closed=False)
        circle = PointGeometry(LatLng(-25, 120), radius=40)

        for geometry in (polygon, line, circle):
            self.overlay.add_shape(Shape(geometry, self.map_view, transform=options or True))

    def _on_transform_ended(self, shape, event):
        scale = event['scale']
        self.status_label.setText(
            f"{shape.kind}: rotation {event['rotation']:.3f} rad, "
            f"scale ({scale.x:.3f}, {scale.y:.3f})")


def load_options(argv):
    """Transform options from an optional JSON file given on the command line"""
    if len(argv) < 2:
        return None
    try:
        return TransformOptions.from_json(argv[1])
    except Exception as e:
        loggerRaise(e, f"Error loading transform options from {argv[1]}")


def main():
    """Main entry point for the transform demo"""
    app = QtWidgets.QApplication(sys.argv)

    app.setStyle("Fusion")

    dark_palette = QPalette()
    dark_palette.setColor(QPalette.Window, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.WindowText, Qt.white)
    dark_palette.setColor(QPalette.Base, QColor(25, 25, 25))
    dark_palette.setColor(QPalette.Text, Qt.white)
    app.setPalette(dark_palette)

    window = TransformDemoWindow(load_options(sys.argv))
    set_main_window(window)
    window.show()
    app.exec_()


if __name__ == "__main__":
    main()
