"""Tests for rendering helpers."""

import jax.numpy as jnp
import numpy as np
import pytest
from PIL import Image
from octet.rendering import display_to_rgb, create_color_scheme, save_screenshot


def test_display_to_rgb_orientation():
    display = jnp.zeros((64, 32), dtype=jnp.bool_).at[10, 3].set(True)

    frame = display_to_rgb(display, scale=1, on_color=(255, 0, 0), off_color=(0, 0, 0))

    assert frame.shape == (32, 64, 3)
    assert tuple(frame[3, 10]) == (255, 0, 0)
    assert tuple(frame[10, 3]) == (0, 0, 0)


def test_display_to_rgb_scale():
    display = jnp.ones((64, 32), dtype=jnp.bool_)
    frame = display_to_rgb(display, scale=4)
    assert frame.shape == (128, 256, 3)
    assert np.all(frame[..., 1] == 255)


def test_unknown_color_scheme():
    with pytest.raises(ValueError):
        create_color_scheme("plaid")


def test_save_screenshot(tmp_path):
    display = jnp.zeros((64, 32), dtype=jnp.bool_).at[0, 0].set(True)
    path = tmp_path / "shot.png"

    save_screenshot(display, str(path), scale=2, color_scheme="white")

    image = Image.open(path)
    assert image.size == (128, 64)
    assert image.getpixel((0, 0)) == (255, 255, 255)
    assert image.getpixel((2, 0)) == (0, 0, 0)
