"""Tests for terrain generation and landing zone carving."""

import numpy as np
import pytest

from lander_sim import constants as C
from lander_sim.config import ConfigurationError, create_test_config
from lander_sim.terrain import (
    HeightMap,
    Terrain,
    create_terrain,
    generate,
    perlin_noise_2d,
)


class TestPerlinNoise:

    def test_deterministic(self):
        x, y = np.meshgrid(np.linspace(0, 5, 30), np.linspace(0, 5, 30))
        np.testing.assert_array_equal(perlin_noise_2d(x, y, 3), perlin_noise_2d(x, y, 3))

    def test_seed_changes_field(self):
        x, y = np.meshgrid(np.linspace(0.1, 5.1, 30), np.linspace(0.1, 5.1, 30))
        assert not np.array_equal(perlin_noise_2d(x, y, 1), perlin_noise_2d(x, y, 2))

    def test_zero_at_lattice_points(self):
        x, y = np.meshgrid(np.arange(-5, 10), np.arange(-5, 10))
        np.testing.assert_array_equal(perlin_noise_2d(x, y, 11), 0.0)

    def test_bounded(self):
        rng = np.random.default_rng(0)
        x = rng.uniform(-50, 50, 5000)
        y = rng.uniform(-50, 50, 5000)
        n = perlin_noise_2d(x, y, 4)
        assert np.all(np.abs(n) <= 2.0)
        assert np.std(n) > 0.01

    def test_continuous(self):
        x = np.linspace(0.0, 3.0, 3001)
        n = perlin_noise_2d(x, np.full_like(x, 0.37), 5)
        assert np.max(np.abs(np.diff(n))) < 0.01

    def test_scalar_input(self):
        assert np.shape(perlin_noise_2d(0.5, 0.5)) == ()


class TestGenerate:

    def test_shape_and_scale(self):
        hm = generate(seed=1, width=64, noise_scale=0.1, z_scale=2.0)
        assert hm.z.shape == (64, 64)
        ix, iy = np.meshgrid(np.arange(64), np.arange(64), indexing='ij')
        np.testing.assert_allclose(hm.z, 2.0 * perlin_noise_2d(ix * 0.1, iy * 0.1, 1))

    def test_same_seed_same_terrain(self):
        np.testing.assert_array_equal(generate(8, 50).z, generate(8, 50).z)

    def test_width_below_minimum_raises(self):
        with pytest.raises(ConfigurationError):
            generate(seed=0, width=46, radius=20.0)

    def test_minimum_width_accepted(self):
        assert generate(seed=0, width=47, radius=20.0).width == 47


class TestHeightMap:

    def test_non_square_rejected(self):
        with pytest.raises(ConfigurationError):
            HeightMap(np.zeros((4, 5)))

    def test_center_and_access(self):
        hm = HeightMap(np.zeros((10, 10)))
        np.testing.assert_array_equal(hm.center(), [5.0, 5.0, 0.0])
        hm.set(2, 3, 1.5)
        assert hm.get(2, 3) == 1.5
        assert hm.z[2, 3] == 1.5

    def test_landing_zone_carve(self):
        rng = np.random.default_rng(42)
        original = rng.uniform(-3.0, 3.0, (60, 60))
        hm = HeightMap(original.copy())
        cx, cy, radius = 30, 28, 10.0
        zone = hm.set_landing_zone(cx, cy, radius)
        cz = original[cx, cy]
        np.testing.assert_array_equal(zone, [30.0, 28.0, cz])
        assert hm.radius == radius

        ix, iy = np.meshgrid(np.arange(60), np.arange(60), indexing='ij')
        d = np.hypot(ix - cx, iy - cy)

        flat = d <= radius
        assert np.all(hm.z[flat] == cz)

        untouched = d >= radius + 2
        assert np.array_equal(hm.z[untouched], original[untouched])

        ring = (d > radius) & (d < radius + 2)
        t = (d[ring] - radius) / 2.0
        np.testing.assert_allclose(hm.z[ring], (1 - t) * cz + t * original[ring])

    def test_blend_weight_rises_outward(self):
        hm = HeightMap(np.full((40, 40), 10.0))
        hm.set(20, 20, 0.0)
        hm.set_landing_zone(20, 20, 5.0)
        profile = hm.z[20, 20:]
        assert np.all(np.diff(profile) >= 0.0)
        assert profile[0] == 0.0
        assert profile[-1] == 10.0

    @pytest.mark.parametrize("cx,cy", [(0, 0), (39, 39), (0, 20), (39, 5)])
    def test_carve_near_edges(self, cx, cy):
        hm = HeightMap(np.random.default_rng(1).normal(size=(40, 40)))
        cz = hm.get(cx, cy)
        hm.set_landing_zone(cx, cy, 5.0)
        ix, iy = np.meshgrid(np.arange(40), np.arange(40), indexing='ij')
        flat = np.hypot(ix - cx, iy - cy) <= 5.0
        assert np.all(hm.z[flat] == cz)

    def test_create_landing_zone_distance(self):
        for seed in range(20):
            hm = generate(seed, 200)
            zone = hm.create_landing_zone(np.random.default_rng(seed), 30.0, 70.0, 20.0)
            dist = np.hypot(zone[0] - 100.0, zone[1] - 100.0)
            assert 29.0 <= dist <= 71.0
            assert zone[0] == int(zone[0])

    def test_create_landing_zone_clamped_into_grid(self):
        hm = HeightMap(np.zeros((20, 20)))
        zone = hm.create_landing_zone(np.random.default_rng(0), 50.0, 60.0, 2.0)
        assert 0 <= zone[0] <= 19
        assert 0 <= zone[1] <= 19

    def test_triangle_mesh(self):
        z = np.arange(9, dtype=float).reshape(3, 3)
        tris = HeightMap(z).triangle_mesh()
        assert tris.shape == (8, 3, 3)
        np.testing.assert_array_equal(tris[0], [[0, 0, 0], [0, 1, 1], [1, 0, 3]])
        np.testing.assert_array_equal(tris[1], [[1, 0, 3], [0, 1, 1], [1, 1, 4]])
        # Every vertex lies on the grid surface
        pts = tris.reshape(-1, 3)
        np.testing.assert_array_equal(pts[:, 2], z[pts[:, 0].astype(int), pts[:, 1].astype(int)])


class TestCreateTerrain:

    def test_start_position(self):
        cfg = create_test_config(init_altitude=150.0)
        terrain = create_terrain(np.random.default_rng(3), cfg)
        hm = terrain.height_map
        expected = hm.center() - terrain.landing_zone + np.array([0.0, 0.0, 150.0])
        np.testing.assert_allclose(terrain.start_position, expected)
        assert terrain.start_position[2] == pytest.approx(150.0 - terrain.landing_zone[2])
        assert terrain.radius == cfg.landing_zone_radius

    def test_zone_is_flat(self):
        terrain = create_terrain(np.random.default_rng(5), create_test_config())
        cx, cy, cz = terrain.landing_zone
        assert terrain.height_map.get(int(cx), int(cy)) == cz
        assert terrain.height_map.get(int(cx) + 5, int(cy)) == cz

    def test_deterministic(self):
        cfg = create_test_config()
        a = create_terrain(np.random.default_rng(12), cfg)
        b = create_terrain(np.random.default_rng(12), cfg)
        assert a.seed == b.seed
        np.testing.assert_array_equal(a.height_map.z, b.height_map.z)
        np.testing.assert_array_equal(a.start_position, b.start_position)

    def test_default_config(self):
        terrain = create_terrain(np.random.default_rng(0))
        assert terrain.height_map.width == C.LANDSCAPE_WIDTH

    def test_scene_geometry(self):
        terrain = create_terrain(np.random.default_rng(1), create_test_config(landscape_width=100))
        geom = terrain.scene_geometry()
        assert geom['triangles'].shape == (2 * 99 * 99, 3, 3)
        np.testing.assert_array_equal(geom['landing_zone'], terrain.landing_zone)
        assert geom['landing_zone_radius'] == terrain.radius
        assert isinstance(terrain, Terrain)
