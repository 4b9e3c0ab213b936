from particlefield.constants import DEFAULT_FPS, PARTICLE_RADIUS


class Particle:
    """A single point in the field: position, velocity, age and lifespan."""

    def __init__(self, x, y, vx, vy, lifespan, fps=DEFAULT_FPS, radius=PARTICLE_RADIUS):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.lifespan = lifespan
        self.fps = fps
        self.radius = radius
        self.frames = 0  # age in whole frames
        self.note = None  # pitch sounded at birth

    @property
    def age(self):
        """Age in seconds."""
        return self.frames / self.fps

    @property
    def born(self):
        return self.frames == 0

    @property
    def expired(self):
        return self.age >= self.lifespan

    @property
    def alpha(self):
        """Opacity fading linearly from 1 at birth to 0 at the end of its lifespan."""
        if self.lifespan <= 0:
            return 0.0
        return min(1.0, max(0.0, 1 - self.age / self.lifespan))

    def tick(self):
        """Advance age by one frame."""
        self.frames += 1

    def wrap(self, width, height):
        """Wrap around the screen edges once a coordinate leaves [0, dimension]."""
        if self.x < 0:
            self.x = width
        elif self.x > width:
            self.x = 0
        if self.y < 0:
            self.y = height
        elif self.y > height:
            self.y = 0

    def __repr__(self):
        return (
            f"Particle(x={self.x:.1f}, y={self.y:.1f}, "
            f"age={self.age:.2f}/{self.lifespan:.2f})"
        )
