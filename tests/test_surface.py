"""
Tests for the raster surface primitives.
"""

import numpy as np
import pytest

from lumigrade.processing.blending import BlendMode
from lumigrade.processing.surface import RadialGradient, RasterSurface


class TestSurfaceBasics:

    def test_from_image_copies(self, random_image):
        surface = RasterSurface.from_image(random_image)
        assert surface.width == 32
        assert surface.height == 24
        np.testing.assert_array_equal(surface.pixels, random_image)

        surface.pixels[0, 0] = 0
        assert not np.shares_memory(surface.pixels, random_image)

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            RasterSurface(0, 10)

    def test_draw_scaled_resamples(self, make_solid):
        surface = RasterSurface(8, 6)
        surface.draw_scaled(make_solid((10, 20, 30), height=3, width=4))
        assert surface.pixels.shape == (6, 8, 4)
        # Uniform input stays uniform after resampling
        assert np.all(surface.pixels[..., 0] == 10)
        assert np.all(surface.pixels[..., 3] == 255)

    def test_draw_scaled_reallocates(self, make_solid):
        surface = RasterSurface(4, 4)
        surface.draw_scaled(make_solid(50, height=2, width=2), dst_w=10, dst_h=5)
        assert (surface.height, surface.width) == (5, 10)

    def test_to_image_is_a_copy(self, random_image):
        surface = RasterSurface.from_image(random_image)
        image = surface.to_image()
        image[...] = 0
        np.testing.assert_array_equal(surface.pixels, random_image)


class TestOriginalSnapshot:

    def test_snapshot_is_read_only(self, random_image):
        surface = RasterSurface.from_image(random_image)
        original = surface.snapshot_original()
        with pytest.raises(ValueError):
            original[0, 0, 0] = 1

    def test_snapshot_survives_mutation(self, random_image):
        surface = RasterSurface.from_image(random_image)
        surface.snapshot_original()
        surface.fill((0, 0, 0, 1.0))
        np.testing.assert_array_equal(surface.original, random_image)
        assert np.all(surface.pixels[..., :3] == 0)

    def test_missing_snapshot(self, random_image):
        surface = RasterSurface.from_image(random_image)
        with pytest.raises(RuntimeError):
            _ = surface.original


class TestCompositing:

    def test_composite_normal_full_opacity(self, random_image, make_solid):
        surface = RasterSurface.from_image(make_solid(0, height=24, width=32))
        surface.composite(random_image, BlendMode.NORMAL, 1.0)
        np.testing.assert_array_equal(surface.pixels, random_image)

    def test_composite_accepts_surface(self, random_image, make_solid):
        surface = RasterSurface.from_image(make_solid(0, height=24, width=32))
        other = RasterSurface.from_image(random_image)
        surface.composite(other, "normal", 1.0)
        np.testing.assert_array_equal(surface.pixels, random_image)

    def test_composite_shape_mismatch(self, random_image, make_solid):
        surface = RasterSurface.from_image(make_solid(0))
        with pytest.raises(ValueError):
            surface.composite(random_image)

    def test_multiply_fill_halves(self, make_solid):
        surface = RasterSurface.from_image(make_solid(200))
        surface.fill((0, 0, 0, 0.5), BlendMode.MULTIPLY)
        assert np.all(surface.pixels[..., :3] == 100)
        assert np.all(surface.pixels[..., 3] == 255)

    def test_screen_fill_lightens(self, make_solid):
        surface = RasterSurface.from_image(make_solid(100))
        surface.fill((255, 255, 255, 1.0), BlendMode.SCREEN, 0.5)
        # screen with white is white; half opacity lands midway
        assert np.all(surface.pixels[..., :3] == 178)

    def test_fill_on_transparent_destination_sets_alpha(self, make_solid):
        surface = RasterSurface.from_image(make_solid(0, alpha=0))
        surface.fill((10, 20, 30, 1.0))
        assert np.all(surface.pixels[..., 3] == 255)
        assert tuple(surface.pixels[0, 0, :3]) == (10, 20, 30)


class TestRadialGradient:

    def test_gradient_stops(self):
        gradient = RadialGradient(
            center=(50.0, 50.0), inner_radius=10.0, outer_radius=40.0,
            inner_color=(0, 0, 0, 0.0), outer_color=(0, 0, 0, 0.8),
        )
        layer = gradient.render(100, 100)
        assert layer.shape == (100, 100, 4)
        # Inside the inner radius: first stop
        assert layer[50, 50, 3] == pytest.approx(0.0)
        # Beyond the outer radius: last stop
        assert layer[0, 0, 3] == pytest.approx(0.8)
        # Monotonic along a ray from the center
        ray = layer[50, 50:, 3]
        assert np.all(np.diff(ray) >= 0)

    def test_fill_gradient_only_touches_outside(self, make_solid):
        surface = RasterSurface.from_image(make_solid(200, height=60, width=60))
        gradient = RadialGradient(
            center=(30.0, 30.0), inner_radius=20.0, outer_radius=30.0,
            inner_color=(0, 0, 0, 0.0), outer_color=(0, 0, 0, 1.0),
        )
        surface.fill_gradient(gradient, BlendMode.MULTIPLY, 1.0)
        assert surface.pixels[30, 30, 0] == 200
        assert surface.pixels[0, 0, 0] == 0


class TestBlur:

    def test_blur_softens_edges(self, checkerboard):
        surface = RasterSurface.from_image(checkerboard)
        surface.blur(2.0)
        assert surface.pixels[..., 0].std() < checkerboard[..., 0].std()
        assert surface.pixels.dtype == np.uint8

    def test_blur_strength_scales_with_radius(self, checkerboard):
        light = RasterSurface.from_image(checkerboard)
        heavy = RasterSurface.from_image(checkerboard)
        light.blur(0.5)
        heavy.blur(2.0)
        assert heavy.pixels[..., 0].std() < light.pixels[..., 0].std()

    def test_zero_radius_is_noop(self, random_image):
        surface = RasterSurface.from_image(random_image)
        surface.blur(0)
        np.testing.assert_array_equal(surface.pixels, random_image)

    def test_uniform_image_unchanged(self, make_solid):
        image = make_solid((90, 120, 150), height=16, width=16)
        surface = RasterSurface.from_image(image)
        surface.blur(1.5)
        np.testing.assert_array_equal(surface.pixels, image)
