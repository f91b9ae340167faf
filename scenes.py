"""
Scene definitions: the built-in example scenes and loading scenes from JSON.

A scene file looks like

    {
      "background": [0, 0, 0],
      "camera": {"position": [0, 0, 0], "viewport_width": 1,
                 "viewport_height": 1, "projection_plane_d": 1},
      "spheres": [
        {"center": [0, -1, 3], "radius": 1, "color": [255, 0, 0],
         "specular": 500, "reflective": 0.2}
      ],
      "lights": [
        {"type": "ambient", "intensity": 0.2},
        {"type": "point", "intensity": 0.6, "position": [2, 1, 0]},
        {"type": "directional", "intensity": 0.2, "direction": [1, 4, 4]}
      ]
    }

Sphere order is kept: when two spheres are hit at the same distance the one
listed first is drawn.
"""
import json

from ray import Scene, Sphere, Material, Camera, AmbientLight, PointLight, DirectionalLight
from materials import NO_SPECULAR
from utils import SceneError


def default_scene():
    """Three shiny spheres standing on a huge yellow one."""
    scene = Scene(
        spheres=[
            Sphere((0, -1, 3), 1, Material((255, 0, 0), specular=500, reflective=0.2)),
            Sphere((2, 0, 4), 1, Material((0, 0, 255), specular=500, reflective=0.3)),
            Sphere((-2, 0, 4), 1, Material((0, 255, 0), specular=10, reflective=0.4)),
            Sphere((0, -5001, 0), 5000, Material((255, 255, 0), specular=1000, reflective=0.5)),
        ],
        lights=[
            AmbientLight(0.2),
            PointLight((2, 1, 0), 0.6),
            DirectionalLight((1, 4, 4), 0.2),
        ],
        bg_color=(0, 0, 0, 255),
    )
    return scene


def matte_scene():
    """The default scene without highlights or reflections."""
    base = default_scene()
    spheres = [Sphere(s.center, s.radius, Material(s.color)) for s in base.spheres]
    return Scene(spheres, base.lights, base.bg_color, base.camera)


SCENES = {
    'default': default_scene,
    'matte': matte_scene,
}


def _require(data, key, where):
    try:
        return data[key]
    except (KeyError, TypeError):
        raise SceneError("Missing '{}' in {}".format(key, where)) from None


def sphere_from_dict(data):
    material = Material(
        _require(data, 'color', 'sphere'),
        specular=data.get('specular', NO_SPECULAR),
        reflective=data.get('reflective', 0.),
    )
    return Sphere(_require(data, 'center', 'sphere'), _require(data, 'radius', 'sphere'), material)


def light_from_dict(data):
    kind = _require(data, 'type', 'light')
    intensity = _require(data, 'intensity', 'light')
    if kind == 'ambient':
        return AmbientLight(intensity)
    elif kind == 'point':
        return PointLight(_require(data, 'position', 'point light'), intensity)
    elif kind == 'directional':
        return DirectionalLight(_require(data, 'direction', 'directional light'), intensity)
    else:
        raise SceneError("Unknown light type '{}'".format(kind))


def camera_from_dict(data):
    if not isinstance(data, dict):
        raise SceneError("Camera description must be an object")
    return Camera(
        position=data.get('position', (0, 0, 0)),
        viewport_width=data.get('viewport_width', 1.0),
        viewport_height=data.get('viewport_height', 1.0),
        projection_plane_d=data.get('projection_plane_d', 1.0),
    )


def _list(data, key):
    items = data.get(key, [])
    if not isinstance(items, list):
        raise SceneError("'{}' must be a list, got {!r}".format(key, items))
    return items


def scene_from_dict(data):
    """Build a Scene from plain data, raising SceneError if anything is malformed."""
    if not isinstance(data, dict):
        raise SceneError("Scene description must be an object")
    return Scene(
        spheres=[sphere_from_dict(s) for s in _list(data, 'spheres')],
        lights=[light_from_dict(l) for l in _list(data, 'lights')],
        bg_color=data.get('background', (0, 0, 0)),
        camera=camera_from_dict(data.get('camera', {})),
    )


def load_scene(path):
    """Read a scene from a JSON file."""
    with open(path) as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SceneError("{} is not valid JSON: {}".format(path, e)) from e
    return scene_from_dict(data)
