import numpy as np


class SceneError(ValueError):
    """Raised when scene configuration is malformed."""


def number(value, what):
    """Convert a configuration value to float, or raise SceneError."""
    if value is None or isinstance(value, (bool, str, bytes)):
        raise SceneError("{} must be a number, got {!r}".format(what, value))
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SceneError("{} must be a number, got {!r}".format(what, value)) from None

def _numeric_array(list):
    try:
        a = np.array(list)
    except (TypeError, ValueError):
        return None
    if a.dtype.kind not in 'iuf':
        return None
    return a.astype(np.float64)

def vec(list):
    """Handy shorthand to make a read-only 3D double-precision vector."""
    v = _numeric_array(list)
    if v is None or v.shape != (3,):
        raise SceneError("Vectors must be of the form v = [vx, vy, vz], got {!r}".format(list))
    v.flags.writeable = False
    return v

def color(list):
    """Make an RGB or RGBA color (channels in the 0-255 range)."""
    c = _numeric_array(list)
    if c is None or c.shape not in ((3,), (4,)):
        raise SceneError("Colors must be of the form [r, g, b] or [r, g, b, a], got {!r}".format(list))
    c.flags.writeable = False
    return c


def dot(v1, v2):
    return float(np.dot(v1, v2))

def length(v):
    return np.sqrt(dot(v, v))

def scale(n, v):
    return n * np.asarray(v, dtype=np.float64)

def add(v1, v2):
    return np.add(v1, v2, dtype=np.float64)

def sub(v1, v2):
    return np.subtract(v1, v2, dtype=np.float64)

def cross(v1, v2):
    return np.cross(v1, v2).astype(np.float64)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    return v / np.linalg.norm(v)

def reflect(incident, normal):
    """Mirror `incident` about `normal`.

    Both vectors point away from the surface; the result does too.
    """
    return sub(scale(2 * dot(incident, normal), normal), incident)


def clamp(c):
    """Clamp every channel of a color into [0, 255].

    A missing alpha channel comes back as fully opaque. Values are not rounded.
    """
    c = np.clip(np.asarray(c, dtype=np.float64), 0.0, 255.0)
    if c.shape[-1] == 3:
        c = np.append(c, 255.0)
    return c

def to_uint8(c):
    """Convert a color to 8-bit RGBA, rounding half up after clamping."""
    return np.floor(clamp(c) + 0.5).astype(np.uint8)
