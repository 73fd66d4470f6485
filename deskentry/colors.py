"""Colour conversions and shading used for light and dark style colours."""

from __future__ import annotations

from collections.abc import Sequence

LIGHTNESS_MULT = 1.3
DARKNESS_MULT = 0.7


def rgb_to_hls(red: float, green: float, blue: float) -> tuple[float, float, float]:
    """Convert an RGB triplet (0..1) to hue (degrees), lightness and saturation."""
    maximum = max(red, green, blue)
    minimum = min(red, green, blue)
    lightness = (maximum + minimum) / 2
    saturation = 0.0
    hue = 0.0

    if maximum != minimum:
        if lightness <= 0.5:
            saturation = (maximum - minimum) / (maximum + minimum)
        else:
            saturation = (maximum - minimum) / (2 - maximum - minimum)

        delta = maximum - minimum
        if red == maximum:
            hue = (green - blue) / delta
        elif green == maximum:
            hue = 2 + (blue - red) / delta
        else:
            hue = 4 + (red - green) / delta

        hue *= 60
        if hue < 0.0:
            hue += 360

    return hue, lightness, saturation


def _wrap_hue(hue: float) -> float:
    while hue > 360:
        hue -= 360
    while hue < 0:
        hue += 360
    return hue


def _channel(m1: float, m2: float, hue: float) -> float:
    hue = _wrap_hue(hue)
    if hue < 60:
        return m1 + (m2 - m1) * hue / 60
    if hue < 180:
        return m2
    if hue < 240:
        return m1 + (m2 - m1) * (240 - hue) / 60
    return m1


def hls_to_rgb(
    hue: float, lightness: float, saturation: float
) -> tuple[float, float, float]:
    """Convert hue (degrees), lightness and saturation to an RGB triplet."""
    if saturation == 0:
        return lightness, lightness, lightness

    if lightness <= 0.5:
        m2 = lightness * (1 + saturation)
    else:
        m2 = lightness + saturation - lightness * saturation
    m1 = 2 * lightness - m2

    return (
        _channel(m1, m2, hue + 120),
        _channel(m1, m2, hue),
        _channel(m1, m2, hue - 120),
    )


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def shade(color: Sequence[float], factor: float) -> tuple[float, ...]:
    """Scale a colour's lightness and saturation by ``factor``.

    ``color`` is (red, green, blue) or (red, green, blue, alpha); any alpha
    channel is passed through unchanged.
    """
    if len(color) not in (3, 4):
        raise ValueError("color must have 3 or 4 components")
    red, green, blue = color[0], color[1], color[2]
    hue, lightness, saturation = rgb_to_hls(red, green, blue)
    lightness = _clamp(lightness * factor)
    saturation = _clamp(saturation * factor)
    return hls_to_rgb(hue, lightness, saturation) + tuple(color[3:])


def light_color(color: Sequence[float]) -> tuple[float, ...]:
    """Return the lighter shade of a background colour."""
    return shade(color, LIGHTNESS_MULT)


def dark_color(color: Sequence[float]) -> tuple[float, ...]:
    """Return the darker shade of a background colour."""
    return shade(color, DARKNESS_MULT)