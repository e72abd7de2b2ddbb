class Integrator:
    """Damped explicit-Euler step plus the alpha cooling schedule."""

    def __init__(self, config):
        self.config = config

    def step(self, nodes, dvx, dvy):
        decay = self.config.velocity_decay
        bounds = self.config.bounds

        for node in nodes:
            if node.pin is not None:
                node.x, node.y = node.pin
                node.vx = 0.0
                node.vy = 0.0
                continue

            node.vx = (node.vx + dvx[node.index]) * decay
            node.vy = (node.vy + dvy[node.index]) * decay
            node.x += node.vx
            node.y += node.vy

            if bounds is not None:
                width, height = bounds
                # Stop the velocity component that hit the wall
                if node.x < 0.0 or node.x > width:
                    node.x = min(max(node.x, 0.0), width)
                    node.vx = 0.0
                if node.y < 0.0 or node.y > height:
                    node.y = min(max(node.y, 0.0), height)
                    node.vy = 0.0

    def cool(self, alpha):
        """Exponential cooling toward alpha_min; snaps once close enough."""
        alpha_min = self.config.alpha_min
        if alpha <= alpha_min:
            return alpha_min
        alpha += (alpha_min - alpha) * self.config.alpha_decay
        if alpha - alpha_min <= self.config.settle_tolerance:
            alpha = alpha_min
        return alpha
