import logging
from dataclasses import dataclass, replace

import numpy as np

from particlefield.constants import (
    DEFAULT_FPS,
    FIXED_LIFESPAN,
    INITIAL_PARTICLES,
    LIFESPAN_MAX,
    LIFESPAN_MIN,
    LINE_ALPHA_MAX,
    LINE_COLOR,
    LINE_WIDTH_MAX,
    LINE_WIDTH_MIN,
    MIN_ACTIVE_PARTICLES,
    NOTE_MAX,
    NOTE_MIN,
    PARTICLE_COLOR,
    PARTICLE_RADIUS,
    PARTICLE_SPEED,
    SPAWNS_PER_SECOND,
    THRESHOLD_FREQUENCY,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
    VELOCITY_MAX,
    VELOCITY_MIN,
)
from particlefield.midi import note_off, note_on
from particlefield.motion import MOTIONS
from particlefield.particle import Particle

logger = logging.getLogger(__name__)


def map_range(value, in_min, in_max, out_min, out_max):
    """Linearly map `value` from [in_min, in_max] to [out_min, out_max] (no clamping)."""
    if in_max == in_min:
        raise ValueError("Input range must not be empty")
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def connection_threshold(t):
    """Maximum connection distance at time `t`, oscillating between 100 and 150."""
    return float(map_range(np.sin(t * THRESHOLD_FREQUENCY), -1, 1, THRESHOLD_MIN, THRESHOLD_MAX))


def edge_style(distance, threshold):
    """
    Opacity and line width for an edge of the given length.
    Returns None when the pair is too far apart to be connected.
    """
    if distance > threshold:
        return None
    alpha = map_range(distance, 0, threshold, LINE_ALPHA_MAX, 0)
    width = map_range(distance, 0, threshold, LINE_WIDTH_MAX, LINE_WIDTH_MIN)
    return alpha, width


def note_for(x, y, width, height):
    """Map a position to a (note, velocity) pair: x picks the pitch, y the loudness."""
    note = map_range(x, 0, width, NOTE_MIN, NOTE_MAX)
    velocity = map_range(y, 0, height, VELOCITY_MIN, VELOCITY_MAX)
    # halves round up, not to even
    return int(np.floor(note + 0.5)), int(np.floor(velocity + 0.5))


@dataclass(frozen=True)
class FieldSettings:
    """Tunable behaviour of a field; the presets in VARIANTS cover both sketches."""

    floor: int = MIN_ACTIVE_PARTICLES
    initial: int = INITIAL_PARTICLES
    spawn_rate: float = SPAWNS_PER_SECOND  # expected extra spawns per second
    lifespan_mode: str = "random"  # "random" or "fixed"
    lifespan_range: tuple = (LIFESPAN_MIN, LIFESPAN_MAX)
    fixed_lifespan: float = FIXED_LIFESPAN
    speed: float = PARTICLE_SPEED
    radius: float = PARTICLE_RADIUS
    motion: str = "drift"
    midi: bool = True

    def __post_init__(self):
        if self.lifespan_mode not in ("random", "fixed"):
            raise ValueError(f"Unknown lifespan mode: {self.lifespan_mode}")
        if self.motion not in MOTIONS:
            raise ValueError(f"Unknown motion model: {self.motion}")

    def with_overrides(self, **kwargs):
        return replace(self, **kwargs)


VARIANTS = {
    "midi": FieldSettings(),
    "steer": FieldSettings(lifespan_mode="fixed", motion="steer", midi=False),
}


@dataclass
class FrameStats:
    spawned: int = 0
    edges: int = 0
    expired: int = 0
    alive: int = 0


class ParticleField:
    """
    A variable-size collection of particles advanced one frame at a time.
    Draws particles and the proximity graph between them onto a canvas and
    optionally sends note events to a MIDI sink.
    """

    def __init__(self, settings=None, fps=DEFAULT_FPS, rng=None, motion=None):
        self.settings = settings or FieldSettings()
        self.fps = fps
        self.rng = rng if rng is not None else np.random.default_rng()
        self.motion = motion or MOTIONS[self.settings.motion]()
        self.particles = []

    def __len__(self):
        return len(self.particles)

    def _lifespan(self):
        if self.settings.lifespan_mode == "fixed":
            return float(self.settings.fixed_lifespan)
        low, high = self.settings.lifespan_range
        return float(self.rng.uniform(low, high))

    def spawn(self, bounds):
        """Create a particle at a uniformly random point inside `bounds` (width, height)."""
        width, height = bounds
        speed = self.settings.speed
        return Particle(
            x=float(self.rng.uniform(0, width)),
            y=float(self.rng.uniform(0, height)),
            vx=float(self.rng.uniform(-speed, speed)),
            vy=float(self.rng.uniform(-speed, speed)),
            lifespan=self._lifespan(),
            fps=self.fps,
            radius=self.settings.radius,
        )

    def populate(self, bounds, count=None):
        """Add the initial population."""
        count = self.settings.initial if count is None else count
        for _ in range(count):
            self.particles.append(self.spawn(bounds))
        logger.info(f"[+] Seeded field with {count} particles")
        return count

    def top_up(self, bounds):
        """Spawn particles until the field holds at least `floor` of them."""
        added = 0
        while len(self.particles) < self.settings.floor:
            self.particles.append(self.spawn(bounds))
            added += 1
        return added

    def maybe_spawn(self, bounds):
        """Bernoulli trial with probability rate/fps for one extra particle."""
        if self.rng.random() < self.settings.spawn_rate / self.fps:
            self.particles.append(self.spawn(bounds))
            return 1
        return 0

    def _close_pairs(self, threshold):
        """Index pairs (i < j) of particles no further apart than `threshold`, with their distances."""
        n = len(self.particles)
        if n < 2:
            return np.empty(0, dtype=int), np.empty(0, dtype=int), np.empty(0)

        pos = np.array([(p.x, p.y) for p in self.particles], dtype=np.float64)
        i, j = np.triu_indices(n, k=1)
        diff = pos[i] - pos[j]
        dist = np.hypot(diff[:, 0], diff[:, 1])
        close = dist <= threshold
        return i[close], j[close], dist[close]

    def draw_connections(self, canvas, threshold):
        i_idx, j_idx, distances = self._close_pairs(threshold)
        if canvas is None:
            return len(distances)

        for i, j, d in zip(i_idx, j_idx, distances):
            alpha, width = edge_style(d, threshold)
            p1, p2 = self.particles[i], self.particles[j]
            canvas.stroke_line((p1.x, p1.y), (p2.x, p2.y), (*LINE_COLOR, alpha), width)
        return len(distances)

    def step(self, dt, bounds, time, canvas=None, sink=None):
        """
        Advance the field by one frame.

        `dt` must equal 1/fps; aging is counted in whole frames.
        `canvas` receives the drawing calls and `sink` the note events; either
        may be None.
        """
        if not np.isclose(dt, 1 / self.fps):
            raise ValueError(f"Frame step dt={dt} does not match {self.fps}fps")

        width, height = bounds
        stats = FrameStats()

        # 1. Keep the population above the floor, 2. random arrivals
        stats.spawned = self.top_up(bounds)
        stats.spawned += self.maybe_spawn(bounds)

        # 3-4. Proximity graph, using positions before this frame's motion
        threshold = connection_threshold(time)
        stats.edges = self.draw_connections(canvas, threshold)

        survivors = []
        for particle in self.particles:
            # 5. Motion
            self.motion.move(particle, width, height, time)

            # 6. Draw
            if canvas is not None:
                canvas.fill_circle(
                    (particle.x, particle.y), particle.radius, (*PARTICLE_COLOR, particle.alpha)
                )

            # 7. Note on at birth
            if particle.born:
                note, velocity = note_for(particle.x, particle.y, width, height)
                particle.note = note
                if sink is not None:
                    sink.send(note_on(note, velocity))

            # 8. Age, then release and drop expired particles
            particle.tick()
            if particle.expired:
                if sink is not None and particle.note is not None:
                    sink.send(note_off(particle.note))
                stats.expired += 1
            else:
                survivors.append(particle)

        self.particles = survivors
        stats.alive = len(survivors)
        logger.debug(
            f"t={time:.2f} threshold={threshold:.1f} spawned={stats.spawned} "
            f"edges={stats.edges} expired={stats.expired} alive={stats.alive}"
        )
        return stats

    def release_all(self, sink):
        """Send note-off for every sounding particle, e.g. on shutdown."""
        if sink is None:
            return 0
        released = 0
        for particle in self.particles:
            if particle.note is not None:
                sink.send(note_off(particle.note))
                released += 1
        return released
