import logging

from .errors import DragStateError

logger = logging.getLogger(__name__)

FREE = "free"
DRAGGING = "dragging"


class DragController:
    """Turns pointer drags into temporary pins on a simulation's nodes.

    Each node id has its own free/dragging state, so several nodes can be
    dragged at once.
    """

    def __init__(self, simulation):
        self.simulation = simulation
        self._pins = {}  # id -> pin tuple set by this controller

    def state(self, node_id):
        node = self.simulation.node(node_id)
        return DRAGGING if self._is_dragging(node) else FREE

    @property
    def dragging(self):
        self._prune()
        return frozenset(self._pins)

    def _is_dragging(self, node):
        # Unpinning, re-pinning or removing the node through the simulation
        # ends the drag; replace() carries the pin tuple itself over.
        pin = self._pins.get(node.id)
        return pin is not None and node.pin is pin

    def _prune(self):
        for node_id in list(self._pins):
            if node_id not in self.simulation or not self._is_dragging(self.simulation.node(node_id)):
                del self._pins[node_id]

    def begin_drag(self, node_id, x, y):
        self.simulation.node(node_id)
        self._pin(node_id, x, y)
        self.simulation.reheat(self.simulation.config.drag_reheat)
        logger.debug(f"Drag started on {node_id!r} at ({x:.1f}, {y:.1f})")

    def drag_move(self, node_id, x, y):
        node = self.simulation.node(node_id)
        if not self._is_dragging(node):
            self._pins.pop(node_id, None)
            raise DragStateError(node_id, DRAGGING, FREE)
        self._pin(node_id, x, y)

    def end_drag(self, node_id):
        node = self.simulation.node(node_id)
        if not self._is_dragging(node):
            self._pins.pop(node_id, None)
            raise DragStateError(node_id, DRAGGING, FREE)
        del self._pins[node_id]
        self.simulation.unpin(node_id)
        logger.debug(f"Drag ended on {node_id!r}")

    def cancel_all(self):
        """Releases every active drag, e.g. when the pointer leaves the view."""
        for node_id in sorted(self.dragging, key=repr):
            self.simulation.unpin(node_id)
        self._pins.clear()

    def _pin(self, node_id, x, y):
        self.simulation.pin(node_id, float(x), float(y))
        self._pins[node_id] = self.simulation.node(node_id).pin
