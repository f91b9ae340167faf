import unittest
import numpy as np
from ray import *
from utils import normalize, vec

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


def single_sphere_scene(sphere, lights, bg_color=(0, 0, 0)):
    return Scene([sphere], lights, bg_color=bg_color)


class TestVectorMath(unittest.TestCase):

    def test_basic_ops(self):
        a = vec([1, 2, 3])
        b = vec([4, -5, 6])
        self.assertEqual(dot(a, b), 12.0)
        self.assertAlmostEqual(length(vec([3, 4, 12])), 13.0)
        np.testing.assert_array_equal(scale(2, a), [2, 4, 6])
        np.testing.assert_array_equal(add(a, b), [5, -3, 9])
        np.testing.assert_array_equal(sub(a, b), [-3, 7, -3])
        np.testing.assert_array_equal(cross(vec([1, 0, 0]), vec([0, 1, 0])), [0, 0, 1])
        # inputs untouched
        np.testing.assert_array_equal(a, [1, 2, 3])
        np.testing.assert_array_equal(b, [4, -5, 6])

    def test_reflect(self):
        np.testing.assert_allclose(reflect(vec([1, 1, 0]), vec([0, 1, 0])), [-1, 1, 0])
        # straight back along the normal
        np.testing.assert_allclose(reflect(vec([0, 0, -1]), vec([0, 0, -1])), [0, 0, -1])

    def test_vectors_are_3d_only(self):
        with self.assertRaises(SceneError):
            vec([1, 2])
        with self.assertRaises(SceneError):
            vec([1, 2, 3, 4])

    def test_vectors_are_read_only(self):
        v = vec([1, 2, 3])
        with self.assertRaises(ValueError):
            v[0] = 5


class TestColor(unittest.TestCase):

    def test_clamp(self):
        np.testing.assert_array_equal(clamp([300, -5, 12.5]), [255, 0, 12.5, 255])
        np.testing.assert_array_equal(clamp([10, 20, 30, 40]), [10, 20, 30, 40])
        np.testing.assert_array_equal(clamp([10, 20, 30, 900]), [10, 20, 30, 255])

    def test_clamp_idempotent(self):
        for c in ([300, -5, 12.5], [1e9, 0.5, -1e9, 17], [0, 0, 0]):
            once = clamp(c)
            np.testing.assert_array_equal(clamp(once), once)

    def test_to_uint8_rounds_half_up(self):
        np.testing.assert_array_equal(to_uint8([50.5, 0.49, 255 * 0.2]), [51, 0, 51, 255])
        np.testing.assert_array_equal(to_uint8([254.6, 999, -3, 0]), [255, 255, 0, 0])
        self.assertEqual(to_uint8([1, 2, 3]).dtype, np.uint8)

    def test_color_arity(self):
        with self.assertRaises(SceneError):
            color([1, 2])

    def test_non_numeric_values(self):
        self.assertEqual(number(2, "x"), 2.0)
        for bad in ("1", None, True, [1], {"a": 1}):
            with self.assertRaises(SceneError):
                number(bad, "x")
        for bad in ("abc", ["0", "1", "2"], [1, None, 3], [1, [2], 3], None):
            with self.assertRaises(SceneError):
                vec(bad)
            with self.assertRaises(SceneError):
                color(bad)


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray)
        self.assertLess(hit.t, np.inf)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius)
        self.assertIs(hit.sphere, sphere)
        return hit

    def test_roots_depend_on_direction(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([255, 0, 0])))
        t1, t2 = sphere.intersect_roots(vec([0, 0, 0]), vec([0, 0, 1]))
        self.assertAlmostEqual(t1, 6.0)
        self.assertAlmostEqual(t2, 4.0)
        # the reversed ray meets the sphere at negative t
        t1, t2 = sphere.intersect_roots(vec([0, 0, 0]), vec([0, 0, -1]))
        self.assertAlmostEqual(t1, -4.0)
        self.assertAlmostEqual(t2, -6.0)

    def test_misses_and_degenerate_rays(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([255, 0, 0])))
        self.assertEqual(sphere.intersect_roots(vec([0, 3, 0]), vec([0, 0, 1])), (np.inf, np.inf))
        self.assertEqual(sphere.intersect_roots(vec([0, 0, 0]), vec([0, 0, 0])), (np.inf, np.inf))
        self.assertIs(sphere.intersect(Ray(vec([0, 0, 0]), vec([0, 0, 0]))), no_hit)

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(vec([0, 0, 0]), 1.0, Material(vec([1, 1, 1])))
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0, 0.0, 0.0]), vec([-1.0, 0.0, 0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # dead center with non-unit direction
        hit = self.confirm_hit(unit_sphere, Ray(vec([3.0, 0.0, 0.0]), vec([-2.0, 0.0, 0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0, 0.5, 0.0]), vec([-1.0, 0.0, 0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0, 3.0, 4.0]), vec([-2.0, -3.0, -4.0])))
        self.assertAlmostEqual(hit.t, 1 - 1 / np.sqrt(29))

    def test_range_is_open(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([1, 1, 1])))
        # near root excluded, far root accepted
        hit = self.confirm_hit(sphere, Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=4.0))
        self.assertAlmostEqual(hit.t, 6.0)
        self.assertIs(sphere.intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=6.0)), no_hit)
        self.assertIs(sphere.intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1]), end=4.0)), no_hit)

    def test_bad_radius(self):
        for r in (0, -1.0):
            with self.assertRaises(SceneError):
                Sphere(vec([0, 0, 0]), r, Material(vec([1, 1, 1])))
        for r in ("1", None):
            with self.assertRaises(SceneError):
                Sphere(vec([0, 0, 0]), r, Material(vec([1, 1, 1])))

    def test_bad_material(self):
        for material in (None, {"color": [255, 0, 0]}, "red"):
            with self.assertRaises(SceneError):
                Sphere(vec([0, 0, 0]), 1.0, material)
        with self.assertRaises(SceneError):
            Material(vec([1, 1, 1]), reflective="0.5")
        with self.assertRaises(SceneError):
            Material(vec([1, 1, 1]), specular=None)

    def test_rgba_material(self):
        material = Material([255, 0, 0, 128], specular=10)
        np.testing.assert_array_equal(material.color, [255, 0, 0])
        self.assertEqual(material.specular, 10.0)


class TestClosestIntersection(unittest.TestCase):

    def setUp(self):
        self.red = Material(vec([255, 0, 0]))
        self.blue = Material(vec([0, 0, 255]))

    def test_nearest_wins(self):
        far = Sphere(vec([0, 0, 10]), 1.0, self.red)
        near = Sphere(vec([0, 0, 5]), 1.0, self.blue)
        hit = closest_intersection(Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=1.0), [far, near])
        self.assertIs(hit.sphere, near)
        self.assertAlmostEqual(hit.t, 4.0)

    def test_ties_go_to_first_sphere(self):
        a = Sphere(vec([0, 0, 5]), 1.0, self.red)
        b = Sphere(vec([0, 0, 5]), 1.0, self.blue)
        ray = Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=1.0)
        self.assertIs(closest_intersection(ray, [a, b]).sphere, a)
        self.assertIs(closest_intersection(ray, [b, a]).sphere, b)

    def test_both_roots_considered(self):
        # camera inside the sphere sees its far side
        big = Sphere(vec([0, 0, 0]), 10.0, self.red)
        hit = closest_intersection(Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=1.0), [big])
        self.assertAlmostEqual(hit.t, 10.0)
        np.testing.assert_allclose(hit.normal, [0, 0, 1])

    def test_nothing_in_range(self):
        behind = Sphere(vec([0, 0, -5]), 1.0, self.red)
        self.assertIs(closest_intersection(Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=1.0), [behind]), no_hit)
        self.assertIs(closest_intersection(Ray(vec([0, 0, 0]), vec([0, 0, 1])), []), no_hit)


class TestCamera(unittest.TestCase):

    def test_default_camera(self):
        cam = Camera()
        np.testing.assert_allclose(cam.viewport_direction(0, 0, 600, 600), [0, 0, 1])
        np.testing.assert_allclose(cam.viewport_direction(300, -150, 600, 600), [0.5, -0.25, 1])
        ray = cam.generate_ray(0, 0, 600, 600)
        np.testing.assert_array_equal(ray.origin, [0, 0, 0])
        assert_direction_matches(ray.direction, vec([0, 0, 1]))
        self.assertEqual(ray.start, 1.0)
        self.assertEqual(ray.end, np.inf)

    def test_viewport_and_distance(self):
        cam = Camera(vec([1, 2, 3]), viewport_width=2.0, viewport_height=1.0, projection_plane_d=3.0)
        np.testing.assert_allclose(cam.viewport_direction(100, 100, 200, 400), [1.0, 0.25, 3.0])
        np.testing.assert_array_equal(cam.generate_ray(0, 0, 10, 10).origin, [1, 2, 3])

    def test_bad_camera(self):
        with self.assertRaises(SceneError):
            Camera(viewport_width=0)
        with self.assertRaises(SceneError):
            Camera(projection_plane_d=-1)
        with self.assertRaises(SceneError):
            Camera(viewport_width="2")
        with self.assertRaises(SceneError):
            Scene([], [], camera="cam")
        with self.assertRaises(SceneError):
            Scene([], [], camera={"position": [0, 0, 0]})


class TestLighting(unittest.TestCase):

    p = vec([0, 0, 0])
    n = vec([0, 1, 0])
    v = vec([1, 1, 0])

    def lighting(self, lights, spheres=(), specular=NO_SPECULAR, view=None):
        scene = Scene(spheres, lights)
        return compute_lighting(self.p, self.n, self.v if view is None else view, specular, scene, EPSILON)

    def test_ambient(self):
        self.assertAlmostEqual(self.lighting([AmbientLight(0.2)]), 0.2)
        self.assertAlmostEqual(self.lighting([AmbientLight(0.2), AmbientLight(0.3)]), 0.5)

    def test_diffuse(self):
        # light directly overhead
        self.assertAlmostEqual(self.lighting([PointLight(vec([0, 2, 0]), 0.6)]), 0.6)
        # light at 60 degrees; distance does not matter
        self.assertAlmostEqual(self.lighting([PointLight(vec([0, 1, np.sqrt(3)]), 0.6)]), 0.3)
        self.assertAlmostEqual(self.lighting([DirectionalLight(vec([0, 10, 0]), 0.4)]), 0.4)

    def test_facing_away(self):
        self.assertEqual(self.lighting([PointLight(vec([0, -2, 0]), 0.6)]), 0.0)
        self.assertEqual(self.lighting([DirectionalLight(vec([0, -1, 0]), 0.6)], specular=10), 0.0)

    def test_specular(self):
        # mirror direction lines up with the viewer, so the highlight is full strength
        light = PointLight(vec([0, 1, 0]), 0.6)
        self.assertAlmostEqual(self.lighting([light], specular=10, view=vec([0, 1, 0])), 1.2)
        # 45 degrees off the mirror direction
        expected = 0.6 + 0.6 * (1 / np.sqrt(2)) ** 10
        self.assertAlmostEqual(self.lighting([light], specular=10, view=vec([1, 1, 0])), expected)
        # disabled highlight
        self.assertAlmostEqual(self.lighting([light], view=vec([0, 1, 0])), 0.6)

    def test_shadow_only_blocks_occluded_light(self):
        lights = [AmbientLight(0.2), PointLight(vec([0, 2, 0]), 0.6), DirectionalLight(vec([0, 1, 1]), 0.3)]
        blocker = Sphere(vec([0, 1, 0]), 0.25, Material(vec([1, 1, 1])))
        lit = self.lighting(lights)
        shadowed = self.lighting(lights, spheres=[blocker])
        self.assertAlmostEqual(lit, 0.2 + 0.6 + 0.3 / np.sqrt(2))
        self.assertAlmostEqual(shadowed, 0.2 + 0.3 / np.sqrt(2))

    def test_occluder_beyond_point_light(self):
        far = Sphere(vec([0, 5, 0]), 1.0, Material(vec([1, 1, 1])))
        # the point light sits between the surface and the sphere
        self.assertAlmostEqual(self.lighting([PointLight(vec([0, 2, 0]), 0.6)], spheres=[far]), 0.6)
        # a directional light is blocked by anything along its direction
        self.assertEqual(self.lighting([DirectionalLight(vec([0, 1, 0]), 0.6)], spheres=[far]), 0.0)

    def test_no_self_shadowing(self):
        sphere = Sphere(vec([0, 0, 0]), 1.0, Material(vec([1, 1, 1])))
        scene = Scene([sphere], [PointLight(vec([0, 3, 0]), 0.6)])
        top = vec([0, 1, 0])
        self.assertAlmostEqual(compute_lighting(top, top, top, NO_SPECULAR, scene, EPSILON), 0.6)

    def test_bad_lights(self):
        with self.assertRaises(SceneError):
            AmbientLight(-0.1)
        with self.assertRaises(SceneError):
            PointLight(vec([0, 0, 0]), -1)
        with self.assertRaises(SceneError):
            Scene([], ["sun"])
        with self.assertRaises(SceneError):
            AmbientLight(None)
        with self.assertRaises(SceneError):
            DirectionalLight(vec([0, 1, 0]), "0.2")
        with self.assertRaises(SceneError):
            Scene(5, [])


class TestTraceRay(unittest.TestCase):

    def setUp(self):
        self.forward = Ray(vec([0, 0, 0]), vec([0, 0, 1]), start=1.0)

    def mirror_scene(self, reflective, bg_color=(10, 20, 30)):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([255, 255, 255]), reflective=reflective))
        return single_sphere_scene(sphere, [AmbientLight(0.5)], bg_color)

    def test_miss_returns_background(self):
        scene = single_sphere_scene(Sphere(vec([0, 0, -5]), 1.0, Material(vec([255, 0, 0]))),
                                    [AmbientLight(1.0)], bg_color=(1, 2, 3, 4))
        np.testing.assert_array_equal(trace_ray(self.forward, scene, 3), [1, 2, 3, 4])
        empty = Scene([], [AmbientLight(1.0)], bg_color=(9, 8, 7))
        np.testing.assert_array_equal(trace_ray(self.forward, empty, 0), [9, 8, 7])

    def test_ambient_only_ignores_view(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([200, 100, 50])))
        scene = single_sphere_scene(sphere, [AmbientLight(0.5)])
        for direction in ([0, 0, 1], [0.1, 0, 1], [0, -0.15, 1]):
            np.testing.assert_allclose(trace_ray(Ray(vec([0, 0, 0]), vec(direction), start=1.0), scene, 3),
                                       [100, 50, 25])

    def test_matte_surface_is_local_color(self):
        scene = self.mirror_scene(0.0)
        np.testing.assert_allclose(trace_ray(self.forward, scene, 5), [127.5, 127.5, 127.5])

    def test_perfect_mirror_is_reflected_color(self):
        # the reflected ray heads back past the camera into the background
        scene = self.mirror_scene(1.0)
        np.testing.assert_array_equal(trace_ray(self.forward, scene, 1), [10, 20, 30])
        scene = self.mirror_scene(1.0, bg_color=(10, 20, 30, 40))
        np.testing.assert_array_equal(trace_ray(self.forward, scene, 1), [10, 20, 30])

    def test_depth_zero_stops_recursion(self):
        scene = self.mirror_scene(1.0)
        np.testing.assert_allclose(trace_ray(self.forward, scene, 0), [127.5, 127.5, 127.5])

    def test_linear_blend(self):
        scene = self.mirror_scene(0.5)
        np.testing.assert_allclose(trace_ray(self.forward, scene, 1), [68.75, 73.75, 78.75])

    def test_reflection_of_another_sphere(self):
        # a mirror at z=5 facing the camera and a lit sphere behind the camera
        mirror = Sphere(vec([0, 0, 5]), 1.0, Material(vec([0, 0, 0]), reflective=1.0))
        behind = Sphere(vec([0, 0, -5]), 1.0, Material(vec([0, 200, 0])))
        scene = Scene([mirror, behind], [AmbientLight(0.5)])
        np.testing.assert_allclose(trace_ray(self.forward, scene, 1), [0, 100, 0])
        # out of bounces: only the (black) mirror itself
        np.testing.assert_allclose(trace_ray(self.forward, scene, 0), [0, 0, 0])

    def test_intensity_is_not_clamped_mid_computation(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([200, 200, 200])))
        scene = single_sphere_scene(sphere, [AmbientLight(1.0), AmbientLight(1.0)])
        np.testing.assert_allclose(trace_ray(self.forward, scene, 0), [400, 400, 400])

    def test_rgba_material_shades_rgb(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material([200, 100, 50, 128]))
        scene = single_sphere_scene(sphere, [AmbientLight(0.5)])
        np.testing.assert_allclose(trace_ray(self.forward, scene, 0), [100, 50, 25])


class TestRenderImage(unittest.TestCase):

    def red_sphere_scene(self):
        sphere = Sphere(vec([0, -1, 3]), 1.0, Material(vec([255, 0, 0])))
        return Scene([sphere], [AmbientLight(0.2)], bg_color=(0, 0, 0))

    def test_front_of_red_sphere(self):
        scene = self.red_sphere_scene()
        ray = scene.camera.generate_ray(0, 0, 2, 2)
        color = trace_ray(ray, scene, 3)
        np.testing.assert_allclose(color, [51, 0, 0])
        np.testing.assert_array_equal(to_uint8(color), [51, 0, 0, 255])

    def test_pixel_layout(self):
        image = render_image(self.red_sphere_scene(), 2, 2)
        self.assertEqual(image.shape, (2, 2, 4))
        self.assertEqual(image.dtype, np.uint8)
        # pixel (0, 0) sits just right of and above the image center
        np.testing.assert_array_equal(image[0, 1], [51, 0, 0, 255])
        np.testing.assert_array_equal(image[0, 0], [0, 0, 0, 255])
        # the lower row looks down into the sphere
        np.testing.assert_array_equal(image[1, 1], [51, 0, 0, 255])

    def test_settings_are_clamped(self):
        self.assertEqual(clamp_settings(99, -1.0), (MAX_DEPTH, EPSILON))
        self.assertEqual(clamp_settings(-3, 0.01), (0, 0.01))
        self.assertEqual(clamp_settings(2, float('nan')), (2, EPSILON))
        self.assertEqual(clamp_settings(2, np.inf), (2, EPSILON))

    def test_out_of_range_depth_renders_like_max_depth(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, Material(vec([255, 255, 255]), reflective=0.5))
        scene = Scene([sphere], [AmbientLight(0.5)], bg_color=(10, 20, 30))
        np.testing.assert_array_equal(render_image(scene, 4, 4, depth=99), render_image(scene, 4, 4, depth=MAX_DEPTH))


if __name__ == '__main__':
    unittest.main()
