from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import QTimer, Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen, QBrush, QFont, QPainterPath, QTransform

import math

from ..drag import DragController

TIER_COLORS = {
    "Money Site": "#f59e0b",  # Amber
    "Tier 1": "#10b981",  # Emerald
    "Tier 2": "#3b82f6",  # Blue
    "Tier 3": "#a855f7",  # Purple
}


class GraphWidget(QWidget):
    nodeClicked = pyqtSignal(str)

    def __init__(self, simulation, parent=None, interval=16):
        super().__init__(parent)
        self.simulation = simulation
        self.drag = DragController(simulation)
        self.snapshot = simulation.snapshot()

        # Rendering settings
        self.node_color = QColor("#00bcd4")  # Cyan, for untagged nodes
        self.node_outline = QColor("#ffffff")
        self.node_text_color = QColor("#cbd5e1")
        self.edge_color = QColor("#475569")
        self.bg_color = QColor("#0f172a")
        self.show_labels = True

        # Camera
        self.offset_x = 0
        self.offset_y = 0
        self.scale = 1.0
        self.min_scale = 0.1
        self.max_scale = 5.0

        # Interaction
        self.dragging_node = None
        self.panning = False
        self.last_mouse_pos = QPointF()

        # Physics Timer
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.physics_loop)
        self.timer.start(interval)

        self.setMouseTracking(True)

    def physics_loop(self):
        if self.simulation.disposed:
            self.timer.stop()
            return
        # Settled layouts only need a new frame while something is pinned
        if not self.simulation.is_settled() or self.drag.dragging:
            self.snapshot = self.simulation.tick()
        self.update()

    def set_simulation(self, simulation):
        """Swaps in a new simulation, e.g. after the campaign list changed."""
        self.drag.cancel_all()
        self.simulation = simulation
        self.drag = DragController(simulation)
        self.snapshot = simulation.snapshot()
        self.dragging_node = None
        if not self.timer.isActive():
            self.timer.start()
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # Fill Background
        painter.fillRect(self.rect(), self.bg_color)
        if self.simulation.disposed:
            return

        # Apply Camera Transform
        transform = QTransform()
        center_x = self.width() / 2
        center_y = self.height() / 2

        transform.translate(center_x + self.offset_x, center_y + self.offset_y)
        transform.scale(self.scale, self.scale)
        painter.setTransform(transform)

        positions = self.snapshot.positions
        nodes = self.simulation.nodes

        # Draw Edges
        pen = QPen(self.edge_color, 2)
        painter.setPen(pen)
        for link in self.simulation.links:
            if link.source_id not in positions or link.target_id not in positions:
                continue
            x1, y1 = positions[link.source_id]
            x2, y2 = positions[link.target_id]
            painter.drawLine(QPointF(x1, y1), QPointF(x2, y2))

            # Arrowhead at the target's rim
            radius = nodes[link.target].radius
            dx = x2 - x1
            dy = y2 - y1
            dist = math.sqrt(dx * dx + dy * dy)
            if dist > radius:
                dx /= dist
                dy /= dist
                end_x = x2 - dx * radius
                end_y = y2 - dy * radius
                arrow_size = 8

                path = QPainterPath()
                path.moveTo(end_x, end_y)
                path.lineTo(end_x - dx * arrow_size + dy * (arrow_size * 0.5),
                            end_y - dy * arrow_size - dx * (arrow_size * 0.5))
                path.lineTo(end_x - dx * arrow_size - dy * (arrow_size * 0.5),
                            end_y - dy * arrow_size + dx * (arrow_size * 0.5))
                path.closeSubpath()
                painter.fillPath(path, self.edge_color)

        # Draw Nodes
        painter.setFont(QFont("Segoe UI", 9))
        for node in nodes:
            if node.id not in positions:
                continue
            x, y = positions[node.id]
            r = node.radius

            painter.setBrush(QBrush(QColor(TIER_COLORS.get(node.group, self.node_color.name()))))
            painter.setPen(QPen(self.node_outline, 1.5))
            rect = QRectF(x - r, y - r, r * 2, r * 2)
            painter.drawEllipse(rect)

            if self.show_labels:
                painter.setPen(self.node_text_color)
                painter.drawText(QRectF(x - 60, y + r + 2, 120, 20),
                                 Qt.AlignmentFlag.AlignCenter, str(node.id))

    def node_at(self, world_x, world_y):
        """Returns the id of the topmost node under a world-space point, or None."""
        positions = self.snapshot.positions
        for node in reversed(self.simulation.nodes):
            if node.id not in positions:
                continue
            x, y = positions[node.id]
            if math.hypot(world_x - x, world_y - y) <= node.radius:
                return node.id
        return None

    def mousePressEvent(self, event):
        mouse_pos = event.position()

        if event.button() == Qt.MouseButton.RightButton:
            self.panning = True
            self.last_mouse_pos = mouse_pos
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            return

        if event.button() == Qt.MouseButton.LeftButton and not self.simulation.disposed:
            world_pos = self.screen_to_world(mouse_pos)
            node_id = self.node_at(world_pos.x(), world_pos.y())
            if node_id is not None:
                self.dragging_node = node_id
                self.drag.begin_drag(node_id, world_pos.x(), world_pos.y())
                self.setCursor(Qt.CursorShape.PointingHandCursor)
                self.nodeClicked.emit(str(node_id))

    def mouseMoveEvent(self, event):
        mouse_pos = event.position()

        if self.panning:
            delta = mouse_pos - self.last_mouse_pos
            self.offset_x += delta.x()
            self.offset_y += delta.y()
            self.last_mouse_pos = mouse_pos
            self.update()

        elif self.dragging_node is not None and self.dragging_node in self.drag.dragging:
            world_pos = self.screen_to_world(mouse_pos)
            self.drag.drag_move(self.dragging_node, world_pos.x(), world_pos.y())
            self.update()

    def mouseReleaseEvent(self, event):
        if self.dragging_node is not None and self.dragging_node in self.drag.dragging:
            self.drag.end_drag(self.dragging_node)
        self.dragging_node = None
        self.panning = False
        self.setCursor(Qt.CursorShape.ArrowCursor)

    def wheelEvent(self, event):
        # Zoom
        angle = event.angleDelta().y()
        factor = 1.1 if angle > 0 else 0.9

        new_scale = self.scale * factor
        if self.min_scale <= new_scale <= self.max_scale:
            self.scale = new_scale
            self.update()

    def closeEvent(self, event):
        self.timer.stop()
        self.drag.cancel_all()
        super().closeEvent(event)

    def center_on_node(self, node_id):
        x, y = self.snapshot[node_id]
        self.offset_x = -x * self.scale
        self.offset_y = -y * self.scale
        self.update()

    def reset_view(self):
        self.offset_x = 0
        self.offset_y = 0
        self.scale = 1.0
        self.update()

    def screen_to_world(self, screen_pos):
        # screen = (world * scale) + offset + center
        center_x = self.width() / 2
        center_y = self.height() / 2

        wx = (screen_pos.x() - center_x - self.offset_x) / self.scale
        wy = (screen_pos.y() - center_y - self.offset_y) / self.scale
        return QPointF(wx, wy)
