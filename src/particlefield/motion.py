import numpy as np

from particlefield.constants import (
    DAMPING,
    EDGE_FORCE,
    EDGE_MARGIN,
    MAX_SPEED,
    STEER_FORCE,
    STEER_FREQUENCY,
    STEER_SCALE,
)


class DriftMotion:
    """Constant velocity drift with screen-edge wraparound."""

    name = "drift"

    def move(self, particle, width, height, time):
        particle.x += particle.vx
        particle.y += particle.vy
        particle.wrap(width, height)


class SteeringMotion:
    """
    Drift plus a slowly rotating sinusoidal steering field, a push away
    from the canvas edges, damping and a speed limit.
    """

    name = "steer"

    def __init__(
        self,
        force=STEER_FORCE,
        frequency=STEER_FREQUENCY,
        scale=STEER_SCALE,
        margin=EDGE_MARGIN,
        edge_force=EDGE_FORCE,
        damping=DAMPING,
        max_speed=MAX_SPEED,
    ):
        self.force = force
        self.frequency = frequency
        self.scale = scale
        self.margin = margin
        self.edge_force = edge_force
        self.damping = damping
        self.max_speed = max_speed

    def steering(self, x, y, time):
        """Acceleration from the steering field at (x, y)."""
        phase = time * self.frequency
        ax = np.sin(phase + y * self.scale) * self.force
        ay = np.cos(phase + x * self.scale) * self.force
        return float(ax), float(ay)

    def avoidance(self, x, y, width, height):
        """Acceleration pushing back towards the interior, growing linearly inside the margin."""
        if self.margin <= 0:
            return 0.0, 0.0

        ax = ay = 0.0
        if x < self.margin:
            ax += (self.margin - x) / self.margin * self.edge_force
        elif x > width - self.margin:
            ax -= (x - (width - self.margin)) / self.margin * self.edge_force
        if y < self.margin:
            ay += (self.margin - y) / self.margin * self.edge_force
        elif y > height - self.margin:
            ay -= (y - (height - self.margin)) / self.margin * self.edge_force
        return ax, ay

    def clamp(self, vx, vy):
        speed = float(np.hypot(vx, vy))
        if speed > self.max_speed:
            factor = self.max_speed / speed
            return vx * factor, vy * factor
        return vx, vy

    def move(self, particle, width, height, time):
        sx, sy = self.steering(particle.x, particle.y, time)
        ex, ey = self.avoidance(particle.x, particle.y, width, height)

        vx = (particle.vx + sx + ex) * self.damping
        vy = (particle.vy + sy + ey) * self.damping
        particle.vx, particle.vy = self.clamp(vx, vy)

        particle.x += particle.vx
        particle.y += particle.vy
        particle.wrap(width, height)


MOTIONS = {
    DriftMotion.name: DriftMotion,
    SteeringMotion.name: SteeringMotion,
}
