import logging
import sys

from PyQt6.QtWidgets import QApplication, QMainWindow, QVBoxLayout, QWidget, QLabel
from PyQt6.QtGui import QAction, QPalette, QColor
from PyQt6.QtCore import Qt

from .campaigns import demo_projects, tier_graph
from .config import LayoutConfig
from .graph_engine import from_networkx, specs_from_networkx
from .ui.graph_widget import GraphWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, projects=None, config=None, seed=0):
        super().__init__()
        self.setWindowTitle("TierVis - Campaign Tier Network")
        self.resize(1200, 800)

        self.projects = projects if projects is not None else demo_projects(seed=seed)
        self.seed = seed
        self.selected_id = None

        # Setup Logic
        self.simulation = from_networkx(tier_graph(self.projects), config=config, seed=seed)

        # Setup UI
        self.init_ui()
        self.setup_theme()

    def init_ui(self):
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)

        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(0, 0, 0, 0)
        self.main_layout.setSpacing(0)

        # Info Bar
        self.info_label = QLabel()
        self.info_label.setStyleSheet("padding: 5px; background-color: #1e293b; color: #ccc; border-bottom: 1px solid #334155;")
        self.main_layout.addWidget(self.info_label)

        self.graph_widget = GraphWidget(self.simulation)
        self.graph_widget.nodeClicked.connect(self.on_node_clicked)
        self.main_layout.addWidget(self.graph_widget)

        self.update_info()
        self.create_menu()

    def create_menu(self):
        menu = self.menuBar()
        menu.clear()

        file_menu = menu.addMenu("&File")
        exit_action = QAction("E&xit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = menu.addMenu("&View")
        reset_action = QAction("Reset View", self)
        reset_action.setShortcut("Ctrl+0")
        reset_action.triggered.connect(self.graph_widget.reset_view)
        view_menu.addAction(reset_action)

        center_action = QAction("Center on Selection", self)
        center_action.setShortcut("Ctrl+E")
        center_action.triggered.connect(self.center_selection)
        view_menu.addAction(center_action)

        labels_action = QAction("Show Labels", self)
        labels_action.setCheckable(True)
        labels_action.setChecked(True)
        labels_action.toggled.connect(self.toggle_labels)
        view_menu.addAction(labels_action)

        layout_menu = menu.addMenu("&Layout")
        reheat_action = QAction("Reheat", self)
        reheat_action.setShortcut("Ctrl+R")
        reheat_action.triggered.connect(lambda: self.simulation.reheat(1.0))
        layout_menu.addAction(reheat_action)

        reload_action = QAction("Reload Campaigns", self)
        reload_action.setShortcut("Ctrl+L")
        reload_action.triggered.connect(self.reload_campaigns)
        layout_menu.addAction(reload_action)

    def setup_theme(self):
        app = QApplication.instance()
        app.setStyle("Fusion")

        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, QColor(30, 41, 59))
        palette.setColor(QPalette.ColorRole.WindowText, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Base, QColor(15, 23, 42))
        palette.setColor(QPalette.ColorRole.Text, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Button, QColor(30, 41, 59))
        palette.setColor(QPalette.ColorRole.ButtonText, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Highlight, QColor(59, 130, 246))
        palette.setColor(QPalette.ColorRole.HighlightedText, Qt.GlobalColor.black)
        app.setPalette(palette)

    def toggle_labels(self, checked):
        self.graph_widget.show_labels = checked
        self.graph_widget.update()

    def reload_campaigns(self):
        """Re-reads the campaign list; surviving campaigns keep their place."""
        nodes, links = specs_from_networkx(tier_graph(self.projects))
        self.simulation.replace(nodes, links)
        self.update_info()

    def update_info(self):
        text = f"{len(self.simulation)} campaigns, {len(self.simulation.links)} links"
        if self.simulation.warnings:
            text += f" ({len(self.simulation.warnings)} dropped)"
        self.info_label.setText(text)

    def on_node_clicked(self, uid):
        self.selected_id = uid
        project = next((p for p in self.projects if p.id == uid), None)
        if project:
            self.info_label.setText(f"{project.name} ({project.tier.value}): {project.verified_links} verified links")

    def center_selection(self):
        if self.selected_id is not None and self.selected_id in self.simulation:
            self.graph_widget.center_on_node(self.selected_id)

    def closeEvent(self, event):
        self.graph_widget.timer.stop()
        self.simulation.dispose()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=logging.INFO)
    app = QApplication(sys.argv)
    window = MainWindow(config=LayoutConfig(charge_strength=-3000.0))
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
