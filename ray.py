import numpy as np
from materials import Material, NO_SPECULAR
from geometry import Sphere, Hit, no_hit, closest_intersection
from utils import *

"""
Core implementation of the ray tracer.

Scenes are made of spheres lit by ambient, point and directional lights. For
each pixel a ray is cast from the camera through the viewport, the nearest
sphere is shaded (ambient + diffuse + specular, with shadow rays) and mirror
reflections are traced recursively up to a fixed depth.

Colors are numpy arrays with channels in the 0-255 range. Intermediate results
are not clamped; only the final pixel value is, in `render_rows`.
"""

MAX_DEPTH = 5 # max recursion depth
DEFAULT_DEPTH = 3
EPSILON = 1e-3 # shadow bias for secondary rays


class Ray:

    def __init__(self, origin, direction, start=0., end=np.inf):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray, a 3D vector (not necessarily normalized)
          start, end : float -- intersections are accepted for start < t < end
        """
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)
        self.start = start
        self.end = end


class Camera:

    def __init__(self, position=(0, 0, 0), viewport_width=1.0, viewport_height=1.0, projection_plane_d=1.0):
        """Create a camera looking down +z.

        Parameters:
          position : (3,) -- the camera's location (a 3D point)
          viewport_width, viewport_height : float -- size of the viewport rectangle
          projection_plane_d : float -- distance from the camera to the viewport
        """
        viewport_width = number(viewport_width, "Viewport width")
        viewport_height = number(viewport_height, "Viewport height")
        projection_plane_d = number(projection_plane_d, "Projection plane distance")
        if not (viewport_width > 0 and viewport_height > 0):
            raise SceneError("Viewport size must be positive, got {}x{}".format(viewport_width, viewport_height))
        if not projection_plane_d > 0:
            raise SceneError("Projection plane distance must be positive, got {}".format(projection_plane_d))
        self.position = vec(position)
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.projection_plane_d = projection_plane_d

    def viewport_direction(self, px, py, width, height):
        """Map a centered pixel coordinate (x right, y up) onto the viewport."""
        return np.array([
            px * self.viewport_width / width,
            py * self.viewport_height / height,
            self.projection_plane_d,
        ], np.float64)

    def generate_ray(self, px, py, width, height):
        """Compute the primary ray through a pixel of a width x height surface.

        Intersections closer than the projection plane (t <= 1) are ignored.
        """
        return Ray(self.position, self.viewport_direction(px, py, width, height), start=1.0)


class AmbientLight:

    def __init__(self, intensity):
        """Create an ambient light of given intensity
        """
        self.intensity = _check_intensity(intensity)

    def illuminate(self, point, normal, view, specular, scene, epsilon):
        """Ambient light reaches every point equally."""
        return self.intensity


class _DirectedLight:
    """Shared shading for lights that cast shadows."""

    # ray parameter of the light itself along the shadow ray
    shadow_end = np.inf

    def light_vector(self, point):
        raise NotImplementedError

    def illuminate(self, point, normal, view, specular, scene, epsilon):
        """Compute the light intensity at a surface point due to this light.

        Parameters:
          point : (3,) -- the surface point
          normal : (3,) -- surface normal at the point
          view : (3,) -- vector from the point towards the viewer
          specular : float -- specular exponent, or NO_SPECULAR
          scene : Scene -- the scene, for shadow rays
          epsilon : float -- shadow bias
        Return:
          float -- diffuse plus specular intensity, 0 when in shadow
        """
        light_vec = self.light_vector(point)

        shadow_ray = Ray(point, light_vec, start=epsilon, end=self.shadow_end)
        if scene.intersect(shadow_ray).t < np.inf:
            return 0.0

        result = 0.0
        n_dot_l = dot(normal, light_vec)
        if n_dot_l > 0:
            result += self.intensity * n_dot_l / (length(normal) * length(light_vec))

        if specular != NO_SPECULAR:
            reflection = reflect(light_vec, normal)
            r_dot_v = dot(reflection, view)
            if r_dot_v > 0:
                result += self.intensity * (r_dot_v / (length(reflection) * length(view))) ** specular

        return result


class PointLight(_DirectedLight):

    shadow_end = 1.0

    def __init__(self, position, intensity):
        """Create a point light at given position and with given intensity"""
        self.position = vec(position)
        self.intensity = _check_intensity(intensity)

    def light_vector(self, point):
        return self.position - point


class DirectionalLight(_DirectedLight):

    def __init__(self, direction, intensity):
        """Create a directional light shining from `direction` (pointing towards the light)"""
        self.direction = vec(direction)
        self.intensity = _check_intensity(intensity)

    def light_vector(self, point):
        return self.direction


def _check_intensity(intensity):
    intensity = number(intensity, "Light intensity")
    if not intensity >= 0:
        raise SceneError("Light intensity must be non-negative, got {}".format(intensity))
    return intensity


class Scene:

    def __init__(self, spheres, lights, bg_color=(0, 0, 0), camera=None):
        """Create a scene containing the given objects.

        Parameters:
          spheres : [Sphere] -- the surfaces; earlier spheres win ties
          lights : [AmbientLight, PointLight or DirectionalLight] -- the lights
          bg_color : (3,) or (4,) -- color seen where no objects appear
          camera : Camera -- the viewpoint (defaults to the origin)
        """
        try:
            self.spheres = tuple(spheres)
            self.lights = tuple(lights)
        except TypeError:
            raise SceneError("Spheres and lights must be sequences") from None
        for surf in self.spheres:
            if not isinstance(surf, Sphere):
                raise SceneError("Only spheres can be rendered, got {!r}".format(surf))
        for light in self.lights:
            if not isinstance(light, (AmbientLight, _DirectedLight)):
                raise SceneError("Unknown light {!r}".format(light))
        self.bg_color = color(bg_color)
        if camera is None:
            camera = Camera()
        elif not isinstance(camera, Camera):
            raise SceneError("Scene camera must be a Camera, got {!r}".format(camera))
        self.camera = camera

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.
        """
        return closest_intersection(ray, self.spheres)


def compute_lighting(point, normal, view, specular, scene, epsilon=EPSILON):
    """Total light intensity arriving at a surface point, summed over all lights.

    The result is not bounded above by 1.
    """
    intensity = 0.0
    for light in scene.lights:
        intensity += light.illuminate(point, normal, view, specular, scene, epsilon)
    return intensity


def trace_ray(ray, scene, depth, epsilon=EPSILON):
    """Compute the color seen along a ray.

    Parameters:
      ray : Ray -- the ray to trace
      scene : Scene -- the scene
      depth : int -- how many more reflection bounces may be traced
      epsilon : float -- shadow bias used for shadow and reflection rays
    Return:
      (3,) -- the unclamped color, or the scene background on a miss
    """
    hit = scene.intersect(ray)
    if hit.t == np.inf:
        return scene.bg_color

    sphere = hit.sphere
    view = -ray.direction
    local_color = compute_lighting(hit.point, hit.normal, view, sphere.specular, scene, epsilon) * sphere.color

    r = sphere.reflective
    if r <= 0 or depth <= 0:
        return local_color

    reflected_ray = Ray(hit.point, reflect(view, hit.normal), start=epsilon)
    reflected_color = trace_ray(reflected_ray, scene, depth - 1, epsilon)

    return local_color * (1 - r) + reflected_color[:3] * r


def clamp_settings(depth, epsilon):
    """Bring render parameters into their supported range."""
    depth = min(max(int(depth), 0), MAX_DEPTH)
    if not (np.isfinite(epsilon) and epsilon > 0):
        epsilon = EPSILON
    return depth, epsilon


def render_rows(scene, nx, ny, depth=DEFAULT_DEPTH, epsilon=EPSILON, verbose=False):
    """Yield (row index, (nx, 4) uint8 RGBA row) pairs from top to bottom."""
    depth, epsilon = clamp_settings(depth, epsilon)
    camera = scene.camera
    left = nx // 2
    top = ny - ny // 2 - 1

    for i in range(ny):
        if verbose:
            print(f"rendering row {i+1}/{ny}...")
        y = top - i
        row = np.zeros((nx, 4), np.uint8)
        for j in range(nx):
            ray = camera.generate_ray(j - left, y, nx, ny)
            row[j] = to_uint8(trace_ray(ray, scene, depth, epsilon))
        yield i, row


def render_image(scene, nx, ny, depth=DEFAULT_DEPTH, epsilon=EPSILON, verbose=False):
    """Render a ray traced image.

    Parameters:
      scene : Scene -- the scene to be rendered
      nx, ny : int -- the dimensions of the rendered image
      depth : int -- reflection depth, clamped to [0, MAX_DEPTH]
      epsilon : float -- shadow bias; the default replaces non-positive values
    Returns:
      (ny, nx, 4) uint8 -- the RGBA image
    """
    output_image = np.zeros((ny, nx, 4), np.uint8)
    for i, row in render_rows(scene, nx, ny, depth, epsilon, verbose):
        output_image[i] = row
    return output_image
