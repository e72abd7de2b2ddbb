from .config import LayoutConfig
from .drag import DragController
from .errors import (
    ConfigError,
    DegenerateInputError,
    DisposedError,
    DragStateError,
    LayoutError,
    LinkResolutionError,
    UnknownNodeError,
)
from .forces import Center, Collide, Force, LinkForce, ManyBody
from .graph_engine import (
    Link,
    LinkSpec,
    Node,
    NodeSpec,
    Simulation,
    Snapshot,
    build,
    from_networkx,
    specs_from_networkx,
)
from .quadtree import QuadTree

__version__ = "0.1.0"
