"""
Lunar Lander Simulation - Terrain Generation

This module builds the lunar surface for a round:
- Seeded 2D gradient (Perlin) noise over a square grid
- A flat landing zone carved at a random offset from the grid center,
  blended back into the surrounding terrain over a 3-cell ring
- The lander start position in the landing-zone frame
- Triangle mesh geometry for a scene layer

Grid convention: z[ix, iy] is the height at (x=ix, y=iy) in the terrain
frame; one cell is one meter.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import constants as C
from .config import ConfigurationError, SimulationConfig

logger = logging.getLogger(__name__)


# Gradient directions for lattice corners
_GRADIENTS = np.array([
    [1.0, 1.0], [-1.0, 1.0], [1.0, -1.0], [-1.0, -1.0],
    [1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0]
])


def _fade(t: np.ndarray) -> np.ndarray:
    """Quintic smoothstep 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def perlin_noise_2d(x, y, seed: int = 0) -> np.ndarray:
    """
    Deterministic 2D gradient noise.

    Zero at integer lattice points; values lie roughly in [-1, 1].

    Args:
        x: X sample coordinates (array-like)
        y: Y sample coordinates, broadcastable against x
        seed: Seed for the permutation table

    Returns:
        Noise values with the broadcast shape of x and y
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    perm = np.random.default_rng(seed).permutation(256)
    perm = np.concatenate([perm, perm])

    x0 = np.floor(x).astype(np.int64)
    y0 = np.floor(y).astype(np.int64)
    xf = x - x0
    yf = y - y0

    def corner(dx: int, dy: int) -> np.ndarray:
        h = perm[perm[(x0 + dx) & 255] + ((y0 + dy) & 255)] % len(_GRADIENTS)
        g = _GRADIENTS[h]
        return g[..., 0] * (xf - dx) + g[..., 1] * (yf - dy)

    u = _fade(xf)
    v = _fade(yf)

    n00 = corner(0, 0)
    n10 = corner(1, 0)
    n01 = corner(0, 1)
    n11 = corner(1, 1)

    nx0 = n00 + u * (n10 - n00)
    nx1 = n01 + u * (n11 - n01)
    return nx0 + v * (nx1 - nx0)


class HeightMap:
    """
    Square grid of terrain heights with one carved landing zone.
    """

    def __init__(self, z: np.ndarray):
        z = np.asarray(z, dtype=np.float64)
        if z.ndim != 2 or z.shape[0] != z.shape[1]:
            raise ConfigurationError(f"Height map must be square, got shape {z.shape}")
        self.z = z
        self.landing_zone = np.zeros(3)
        self.radius: Optional[float] = None

    @property
    def width(self) -> int:
        return self.z.shape[0]

    @property
    def depth(self) -> int:
        return self.z.shape[1]

    def center(self) -> np.ndarray:
        """Grid center (x, y, 0) in the terrain frame."""
        return np.array([self.width / 2.0, self.depth / 2.0, 0.0])

    def get(self, ix: int, iy: int) -> float:
        return float(self.z[ix, iy])

    def set(self, ix: int, iy: int, z: float):
        self.z[ix, iy] = z

    def create_landing_zone(self, rng: np.random.Generator,
                            min_distance: float = C.LANDING_ZONE_MIN_DISTANCE,
                            max_distance: float = C.LANDING_ZONE_MAX_DISTANCE,
                            radius: float = C.LANDING_ZONE_RADIUS) -> np.ndarray:
        """
        Carve a landing zone at a random bearing and distance from the grid center.

        Args:
            rng: Round random generator
            min_distance: Minimum distance from the grid center (cells)
            max_distance: Maximum distance from the grid center (cells)
            radius: Flat disk radius (cells)

        Returns:
            Landing zone (x, y, original center height)
        """
        theta = rng.uniform(0.0, 2.0 * np.pi)
        distance = rng.uniform(min_distance, max_distance)

        center = self.center()
        cx = int(round(center[0] + distance * np.cos(theta)))
        cy = int(round(center[1] + distance * np.sin(theta)))
        cx = min(max(cx, 0), self.width - 1)
        cy = min(max(cy, 0), self.depth - 1)

        logger.debug(f"Landing zone bearing {np.degrees(theta):.1f} deg, "
                     f"distance {distance:.1f}, cell ({cx}, {cy})")
        return self.set_landing_zone(cx, cy, radius)

    def set_landing_zone(self, cx: int, cy: int,
                         radius: float = C.LANDING_ZONE_RADIUS) -> np.ndarray:
        """
        Flatten a disk of `radius` around (cx, cy) and blend the ring out to
        radius + 3 back into the original terrain.

        Cells outside the grid are skipped, so a zone near the edge gets a
        truncated blend.

        Returns:
            Landing zone (x, y, original center height)
        """
        blend_radius = int(radius) + C.LANDING_ZONE_BLEND_MARGIN
        center_z = self.get(cx, cy)

        x_lo, x_hi = max(cx - blend_radius, 0), min(cx + blend_radius, self.width - 1)
        y_lo, y_hi = max(cy - blend_radius, 0), min(cy + blend_radius, self.depth - 1)

        ix = np.arange(x_lo, x_hi + 1)
        iy = np.arange(y_lo, y_hi + 1)
        dx, dy = np.meshgrid(ix - cx, iy - cy, indexing='ij')
        dist = np.sqrt(dx * dx + dy * dy)

        window = self.z[x_lo:x_hi + 1, y_lo:y_hi + 1]
        t = np.clip((dist - radius) / 2.0, 0.0, 1.0)
        blended = (1.0 - t) * center_z + t * window
        inside = dist <= blend_radius
        window[inside] = blended[inside]

        self.landing_zone = np.array([float(cx), float(cy), center_z])
        self.radius = float(radius)
        return self.landing_zone.copy()

    def triangle_mesh(self) -> np.ndarray:
        """
        Two triangles per grid cell.

        Returns:
            Array of shape (2 * (width-1) * (depth-1), 3, 3): triangles of
            (x, y, z) points, ordered by ix then iy
        """
        w, d = self.width, self.depth
        ix, iy = np.meshgrid(np.arange(w - 1), np.arange(d - 1), indexing='ij')
        ix = ix.ravel()
        iy = iy.ravel()

        def points(px, py):
            return np.stack([px, py, self.z[px, py]], axis=-1).astype(np.float64)

        p00 = points(ix, iy)
        p01 = points(ix, iy + 1)
        p10 = points(ix + 1, iy)
        p11 = points(ix + 1, iy + 1)

        first = np.stack([p00, p01, p10], axis=1)
        second = np.stack([p10, p01, p11], axis=1)
        return np.stack([first, second], axis=1).reshape(-1, 3, 3)


def generate(seed: int, width: int = C.LANDSCAPE_WIDTH,
             noise_scale: float = C.NOISE_SCALE, z_scale: float = C.Z_SCALE,
             radius: float = C.LANDING_ZONE_RADIUS) -> HeightMap:
    """
    Generate an uncarved height map.

    z[ix, iy] = z_scale * perlin(ix * noise_scale, iy * noise_scale)

    Raises:
        ConfigurationError: If width cannot hold a landing zone of `radius`
    """
    blend_radius = int(radius) + C.LANDING_ZONE_BLEND_MARGIN
    if width < 2 * blend_radius + 1:
        raise ConfigurationError(
            f"Terrain width {width} is below the minimum {2 * blend_radius + 1} "
            f"for landing zone radius {radius}"
        )

    ix, iy = np.meshgrid(np.arange(width), np.arange(width), indexing='ij')
    z = z_scale * perlin_noise_2d(ix * noise_scale, iy * noise_scale, seed)
    return HeightMap(z)


@dataclass
class Terrain:
    """
    The surface for one round.

    Attributes:
        height_map: Carved height map
        landing_zone: Zone center (x, y, z) in the terrain frame
        start_position: Lander start in the landing-zone frame (m)
        radius: Landing zone radius (m)
        seed: Noise seed
    """
    height_map: HeightMap
    landing_zone: np.ndarray
    start_position: np.ndarray
    radius: float
    seed: int

    def scene_geometry(self) -> dict:
        """Static geometry for a visual layer, in the terrain frame."""
        return {
            'triangles': self.height_map.triangle_mesh(),
            'landing_zone': self.landing_zone.copy(),
            'landing_zone_radius': self.radius,
        }


def create_terrain(rng: np.random.Generator,
                   config: Optional[SimulationConfig] = None) -> Terrain:
    """
    Build the terrain for a round and place the lander.

    The lander starts above the grid center, init_altitude above the zone
    surface; positions are relative to the landing zone.
    """
    if config is None:
        config = SimulationConfig()

    seed = int(rng.integers(0, 2**32))
    height_map = generate(seed, config.landscape_width, config.noise_scale,
                          config.z_scale, config.landing_zone_radius)
    zone = height_map.create_landing_zone(rng,
                                          config.landing_zone_min_distance,
                                          config.landing_zone_max_distance,
                                          config.landing_zone_radius)

    start = height_map.center() - zone + np.array([0.0, 0.0, config.init_altitude])
    logger.info(f"Terrain {config.landscape_width}x{config.landscape_width}, "
                f"landing zone at ({zone[0]:.0f}, {zone[1]:.0f}), "
                f"lander start {np.round(start, 1).tolist()}")

    return Terrain(height_map=height_map, landing_zone=zone, start_position=start,
                   radius=float(config.landing_zone_radius), seed=seed)
