"""
Blend modes for straight-alpha RGBA8 pixels.

Every function works on whole numpy blocks: channel functions take dest (a) and
src (b) channel arrays in 0-255, HSL functions take (..., 3) RGB arrays. The
integer arithmetic follows Aseprite's blend_funcs.cpp, including C-style
truncating division and wrapping to a byte.
"""

import numpy as np

from ase_files.constants import BlendMode


def _int(values) -> np.ndarray:
    return np.asarray(values, dtype=np.int64)


def _div_trunc(numerator, denominator) -> np.ndarray:
    """Integer division rounding toward zero. denominator must be positive."""
    numerator = _int(numerator)
    quotient = np.abs(numerator) // _int(denominator)
    return np.where(numerator < 0, -quotient, quotient)


def _to_byte(values) -> np.ndarray:
    return _int(values) & 0xFF


def mul_un8(a, b) -> np.ndarray:
    return _to_byte(_div_trunc(_int(a) * _int(b), 255))


def div_un8(a, b) -> np.ndarray:
    return _to_byte(_div_trunc(_int(a) * 255, b))


def blend_multiply(a, b) -> np.ndarray:
    return mul_un8(a, b)


def blend_screen(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    return _to_byte(a + b - blend_multiply(a, b))


def blend_hard_light(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    return np.where(
        b < 128,
        blend_multiply(a, b << 1),
        blend_screen((a << 1) - 255, b),
    )


def blend_overlay(a, b) -> np.ndarray:
    return blend_hard_light(b, a)


def blend_darken(a, b) -> np.ndarray:
    return np.minimum(_int(a), _int(b))


def blend_lighten(a, b) -> np.ndarray:
    return np.maximum(_int(a), _int(b))


def blend_color_dodge(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    inverse_b = 255 - b
    return np.where(
        a == 0,
        0,
        np.where(a >= inverse_b, 255, div_un8(a, np.maximum(inverse_b, 1))),
    )


def blend_color_burn(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    inverse_a = 255 - a
    return np.where(
        a == 255,
        255,
        np.where(inverse_a >= b, 0, 255 - div_un8(inverse_a, np.maximum(b, 1))),
    )


def blend_soft_light(a, b) -> np.ndarray:
    na = _int(a) / 255.0
    nb = _int(b) / 255.0

    d = np.where(na <= 0.25, ((16 * na - 12) * na + 4) * na, np.sqrt(na))
    r = np.where(
        nb <= 0.5,
        na - (1.0 - 2.0 * nb) * na * (1.0 - na),
        na + (2.0 * nb - 1.0) * (d - na),
    )
    return (r * 255 + 0.5).astype(np.int64)


def blend_difference(a, b) -> np.ndarray:
    return np.abs(_int(a) - _int(b))


def blend_exclusion(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    return _to_byte(a + b - 2 * mul_un8(a, b))


def blend_addition(a, b) -> np.ndarray:
    return np.clip(_int(a) + _int(b), 0, 255)


def blend_subtract(a, b) -> np.ndarray:
    return np.clip(_int(a) - _int(b), 0, 255)


def blend_divide(a, b) -> np.ndarray:
    a, b = _int(a), _int(b)
    return np.where(
        a == 0,
        0,
        np.where(a >= b, 255, div_un8(a, np.maximum(b, 1))),
    )


# HSL helpers operate on float RGB arrays normalized to 0..1


def _lum(c: np.ndarray) -> np.ndarray:
    return 0.3 * c[..., 0] + 0.59 * c[..., 1] + 0.11 * c[..., 2]


def _sat(c: np.ndarray) -> np.ndarray:
    return c.max(axis=-1) - c.min(axis=-1)


def _clip_color(c: np.ndarray) -> np.ndarray:
    l = _lum(c)[..., None]
    n = c.min(axis=-1)[..., None]
    x = c.max(axis=-1)[..., None]

    below = n < 0
    low_span = np.where(below, l - n, 1.0)
    c = np.where(below, l + ((c - l) * l) / low_span, c)

    above = x > 1
    high_span = np.where(above, x - l, 1.0)
    c = np.where(above, l + ((c - l) * (1 - l)) / high_span, c)
    return c


def _set_lum(c: np.ndarray, l: np.ndarray) -> np.ndarray:
    d = (l - _lum(c))[..., None]
    return _clip_color(c + d)


def _set_sat(c: np.ndarray, s: np.ndarray) -> np.ndarray:
    """Rescale so max - min == s, keeping channel rank order.

    Channels are picked with the same comparisons as Aseprite, so ties resolve
    to the same channel (and min, mid or max may alias one another).
    """
    shape = c.shape
    flat = c.reshape(-1, 3).copy()
    s = np.broadcast_to(s, shape[:-1]).reshape(-1)
    r, g, b = flat[:, 0], flat[:, 1], flat[:, 2]

    gb_min = np.where(g < b, 1, 2)
    i_min = np.where(r < np.minimum(g, b), 0, gb_min)
    gb_max = np.where(g > b, 1, 2)
    i_max = np.where(r > np.where(g > b, g, b), 0, gb_max)
    i_mid = np.where(
        r > g,
        np.where(g > b, 1, np.where(r > b, 2, 0)),
        np.where(g > b, np.where(b > r, 2, 0), 1),
    )

    rows = np.arange(len(flat))
    v_min = flat[rows, i_min]
    v_mid = flat[rows, i_mid]
    v_max = flat[rows, i_max]

    spread = v_max > v_min
    span = np.where(spread, v_max - v_min, 1.0)

    flat[rows, i_mid] = np.where(spread, ((v_mid - v_min) * s) / span, 0.0)
    flat[rows, i_max] = np.where(spread, s, 0.0)
    flat[rows, i_min] = 0.0

    return flat.reshape(shape)


def _normalize(rgb) -> np.ndarray:
    return _int(rgb) / 255.0


def _denormalize(c: np.ndarray) -> np.ndarray:
    return np.clip(c * 255, 0, 255).astype(np.int64)


def blend_hue(dest_rgb, src_rgb) -> np.ndarray:
    dest = _normalize(dest_rgb)
    c = _set_sat(_normalize(src_rgb), _sat(dest))
    return _denormalize(_set_lum(c, _lum(dest)))


def blend_saturation(dest_rgb, src_rgb) -> np.ndarray:
    dest = _normalize(dest_rgb)
    c = _set_sat(dest, _sat(_normalize(src_rgb)))
    return _denormalize(_set_lum(c, _lum(dest)))


def blend_color(dest_rgb, src_rgb) -> np.ndarray:
    dest = _normalize(dest_rgb)
    return _denormalize(_set_lum(_normalize(src_rgb), _lum(dest)))


def blend_luminosity(dest_rgb, src_rgb) -> np.ndarray:
    src = _normalize(src_rgb)
    return _denormalize(_set_lum(_normalize(dest_rgb), _lum(src)))


CHANNEL_BLEND_FUNCS = {
    BlendMode.MULTIPLY: blend_multiply,
    BlendMode.SCREEN: blend_screen,
    BlendMode.OVERLAY: blend_overlay,
    BlendMode.DARKEN: blend_darken,
    BlendMode.LIGHTEN: blend_lighten,
    BlendMode.COLOR_DODGE: blend_color_dodge,
    BlendMode.COLOR_BURN: blend_color_burn,
    BlendMode.HARD_LIGHT: blend_hard_light,
    BlendMode.SOFT_LIGHT: blend_soft_light,
    BlendMode.DIFFERENCE: blend_difference,
    BlendMode.EXCLUSION: blend_exclusion,
    BlendMode.ADDITION: blend_addition,
    BlendMode.SUBTRACT: blend_subtract,
    BlendMode.DIVIDE: blend_divide,
}

HSL_BLEND_FUNCS = {
    BlendMode.HUE: blend_hue,
    BlendMode.SATURATION: blend_saturation,
    BlendMode.COLOR: blend_color,
    BlendMode.LUMINOSITY: blend_luminosity,
}


def blend_normal(dest, src, opacity: int) -> np.ndarray:
    """Composite src over dest with the given layer/cel opacity.

    Args:
        dest: (..., 4) RGBA accumulator pixels
        src: (..., 4) RGBA source pixels
        opacity: 0-255

    Returns:
        (..., 4) uint8 array
    """
    dest = _int(dest)
    src = _int(src)

    dest_alpha = dest[..., 3]
    src_alpha = mul_un8(src[..., 3], opacity)

    result_alpha = src_alpha + dest_alpha - mul_un8(dest_alpha, src_alpha)
    safe_alpha = np.where(result_alpha == 0, 1, result_alpha)[..., None]

    dest_rgb = dest[..., :3]
    rgb = dest_rgb + _div_trunc((src[..., :3] - dest_rgb) * src_alpha[..., None], safe_alpha)
    blended = np.concatenate([_to_byte(rgb), _to_byte(result_alpha)[..., None]], axis=-1)

    over_empty = np.concatenate([src[..., :3], src_alpha[..., None]], axis=-1)

    result = np.where(
        (dest_alpha <= 0)[..., None],
        over_empty,
        np.where((src[..., 3] <= 0)[..., None], dest, blended),
    )
    return result.astype(np.uint8)


def blend_pixels(dest, src, opacity: int, mode: BlendMode = BlendMode.NORMAL) -> np.ndarray:
    """Blend src onto dest with the given mode, then composite with Normal alpha.

    Args:
        dest: (..., 4) RGBA accumulator pixels
        src: (..., 4) RGBA source pixels
        opacity: 0-255
        mode: layer blend mode

    Returns:
        (..., 4) uint8 array
    """
    dest = _int(dest)
    src = _int(src)

    channel_func = CHANNEL_BLEND_FUNCS.get(mode)
    hsl_func = HSL_BLEND_FUNCS.get(mode)

    if channel_func is not None:
        rgb = channel_func(dest[..., :3], src[..., :3])
        src = np.concatenate([rgb, src[..., 3:]], axis=-1)
    elif hsl_func is not None:
        rgb = hsl_func(dest[..., :3], src[..., :3])
        src = np.concatenate([rgb, src[..., 3:]], axis=-1)

    return blend_normal(dest, src, opacity)
