class LayoutError(Exception):
    """Base class for everything the layout engine raises."""


class LinkResolutionError(LayoutError):
    """A link names a node id that is not part of the simulation.

    Never raised by build(); instances are collected as warnings.
    """

    def __init__(self, source_id, target_id, missing_id):
        self.source_id = source_id
        self.target_id = target_id
        self.missing_id = missing_id
        super().__init__(f"Link {source_id!r} -> {target_id!r} dropped: unknown node {missing_id!r}")


class UnknownNodeError(LayoutError, LookupError):
    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Unknown node: {node_id!r}")


class DisposedError(LayoutError, RuntimeError):
    def __init__(self, operation="call"):
        super().__init__(f"Simulation is disposed, cannot {operation}")


class DegenerateInputError(LayoutError, ValueError):
    """Malformed node or link input (duplicate ids, non-finite numbers...)."""


class ConfigError(LayoutError, ValueError):
    pass


class DragStateError(LayoutError, RuntimeError):
    def __init__(self, node_id, expected, actual):
        self.node_id = node_id
        super().__init__(f"Node {node_id!r} is {actual}, expected {expected}")
