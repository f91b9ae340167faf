import numpy as np
from materials import Material
from utils import SceneError, vec, dot, number

class Hit:
    def __init__(self, t, point=None, normal=None, sphere=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D outward-facing unit normal to the surface at the hit point
          sphere : (Sphere) -- the surface that was hit
        """
        self.t = t
        self.point = point
        self.normal = normal
        self.sphere = sphere

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


class Sphere:

    def __init__(self, center, radius, material):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          material : Material -- the material of the surface
        """
        radius = number(radius, "Sphere radius")
        if not radius > 0:
            raise SceneError("Sphere radius must be positive, got {}".format(radius))
        if not isinstance(material, Material):
            raise SceneError("Sphere material must be a Material, got {!r}".format(material))
        self.center = vec(center)
        self.radius = radius
        self.material = material

    @property
    def color(self):
        return self.material.color

    @property
    def specular(self):
        return self.material.specular

    @property
    def reflective(self):
        return self.material.reflective

    def intersect_roots(self, origin, direction):
        """Solve for both ray parameters where origin + t * direction meets the sphere.

        Return:
          (t1, t2) -- the roots, larger one first; (inf, inf) when the ray
          misses or the direction has zero length
        """
        sphere_vec = origin - self.center
        a = dot(direction, direction)
        if a == 0:
            return np.inf, np.inf
        b = 2 * dot(sphere_vec, direction)
        c = dot(sphere_vec, sphere_vec) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return np.inf, np.inf
        disc_sqrt = np.sqrt(discriminant)
        return (-b + disc_sqrt) / (2 * a), (-b - disc_sqrt) / (2 * a)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit -- the hit data
        """
        t = np.inf
        for root in self.intersect_roots(ray.origin, ray.direction):
            if ray.start < root < ray.end and root < t:
                t = root
        if t == np.inf:
            return no_hit
        return self._hit_at(ray, t)

    def _hit_at(self, ray, t):
        point = ray.origin + t * ray.direction
        normal = (point - self.center) / self.radius
        return Hit(t, point, normal, self)

    def __repr__(self):
        return "Sphere(center={}, radius={}, {!r})".format(
            np.array2string(self.center), self.radius, self.material)


def closest_intersection(ray, spheres):
    """Find the nearest sphere hit along a ray.

    Every root of every sphere inside the open interval (ray.start, ray.end)
    is considered. When two spheres are hit at the same t the one that comes
    first in `spheres` wins.

    Parameters:
      ray : Ray -- the ray to trace
      spheres : [Sphere] -- candidate surfaces, in scene order
    Return:
      Hit -- the hit data, or no_hit
    """
    closest_hit = no_hit
    for sphere in spheres:
        hit = sphere.intersect(ray)
        if hit.t < closest_hit.t:
            closest_hit = hit
    return closest_hit
