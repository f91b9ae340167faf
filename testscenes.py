import json
import os
import tempfile
import threading
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

import numpy as np
from PIL import Image as PIM

import cli
from canvas import Canvas
from driver import FrameDriver
from ray import *
from scenes import default_scene, matte_scene, scene_from_dict, load_scene


SCENE_DATA = {
    "background": [10, 20, 30],
    "camera": {"position": [0, 0, -1], "viewport_width": 2},
    "spheres": [
        {"center": [0, -1, 3], "radius": 1, "color": [255, 0, 0], "specular": 500, "reflective": 0.2},
        {"center": [2, 0, 4], "radius": 1, "color": [0, 0, 255]},
    ],
    "lights": [
        {"type": "ambient", "intensity": 0.2},
        {"type": "point", "intensity": 0.6, "position": [2, 1, 0]},
        {"type": "directional", "intensity": 0.2, "direction": [1, 4, 4]},
    ],
}


def with_changes(path, value):
    data = json.loads(json.dumps(SCENE_DATA))
    target = data
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    return data


class TestSceneConfig(unittest.TestCase):

    def test_default_scene(self):
        scene = default_scene()
        self.assertEqual(len(scene.spheres), 4)
        self.assertEqual([type(l) for l in scene.lights], [AmbientLight, PointLight, DirectionalLight])
        np.testing.assert_array_equal(scene.spheres[0].center, [0, -1, 3])
        self.assertEqual(scene.spheres[3].radius, 5000)
        np.testing.assert_array_equal(scene.bg_color, [0, 0, 0, 255])

    def test_matte_scene(self):
        for sphere in matte_scene().spheres:
            self.assertEqual(sphere.specular, NO_SPECULAR)
            self.assertEqual(sphere.reflective, 0.0)

    def test_scene_from_dict(self):
        scene = scene_from_dict(SCENE_DATA)
        red, blue = scene.spheres
        np.testing.assert_array_equal(red.color, [255, 0, 0])
        self.assertEqual(red.specular, 500)
        self.assertEqual(red.reflective, 0.2)
        self.assertEqual(blue.specular, NO_SPECULAR)
        self.assertEqual(blue.reflective, 0.0)
        self.assertIsInstance(scene.lights[1], PointLight)
        np.testing.assert_array_equal(scene.lights[2].direction, [1, 4, 4])
        np.testing.assert_array_equal(scene.camera.position, [0, 0, -1])
        self.assertEqual(scene.camera.viewport_width, 2.0)
        self.assertEqual(scene.camera.viewport_height, 1.0)
        np.testing.assert_array_equal(scene.bg_color, [10, 20, 30])

    def test_empty_scene_defaults(self):
        scene = scene_from_dict({})
        self.assertEqual(scene.spheres, ())
        self.assertEqual(scene.lights, ())
        np.testing.assert_array_equal(scene.camera.position, [0, 0, 0])

    def test_malformed_scenes(self):
        bad = [
            with_changes(["spheres", 0, "radius"], 0),
            with_changes(["spheres", 0, "radius"], -2),
            with_changes(["spheres", 0, "center"], [0, 1]),
            with_changes(["spheres", 0, "color"], [255, 0]),
            with_changes(["spheres", 0, "reflective"], 1.5),
            with_changes(["spheres", 0, "specular"], 0),
            with_changes(["lights", 0, "intensity"], -0.2),
            with_changes(["lights", 0, "type"], "spot"),
            with_changes(["lights", 1], {"type": "point", "intensity": 0.6}),
            with_changes(["spheres", 1], {"center": [2, 0, 4], "radius": 1}),
            with_changes(["camera"], [0, 0, 0]),
            with_changes(["camera", "viewport_width"], 0),
            with_changes(["background"], [1, 2]),
            with_changes(["spheres", 0, "radius"], "1"),
            with_changes(["spheres", 0, "reflective"], "0.5"),
            with_changes(["spheres", 0, "specular"], None),
            with_changes(["spheres", 0, "center"], "abc"),
            with_changes(["spheres", 0, "center"], ["0", "1", "2"]),
            with_changes(["spheres", 0, "color"], [255, None, 0]),
            with_changes(["lights", 0, "intensity"], None),
            with_changes(["lights", 2, "direction"], [1, [4], 4]),
            with_changes(["camera", "projection_plane_d"], "far"),
            with_changes(["background"], "black"),
            with_changes(["spheres"], 5),
            with_changes(["lights"], {"type": "ambient", "intensity": 0.2}),
            with_changes(["spheres", 0], "sphere"),
            [],
        ]
        for data in bad:
            with self.assertRaises(SceneError, msg=str(data)):
                scene_from_dict(data)

    def test_load_scene(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "scene.json")
            with open(path, "w") as f:
                json.dump(SCENE_DATA, f)
            scene = load_scene(path)
            self.assertEqual(len(scene.spheres), 2)

            broken = os.path.join(tmp, "broken.json")
            with open(broken, "w") as f:
                f.write("{not json")
            with self.assertRaises(SceneError):
                load_scene(broken)


class TestCanvas(unittest.TestCase):

    def test_put_pixel_centered(self):
        canvas = Canvas(4, 4)
        canvas.put_pixel(0, 0, [10, 20, 30])
        np.testing.assert_array_equal(canvas.pixels[1, 2], [10, 20, 30, 255])
        canvas.put_pixel(-2, -2, [300, -4, 7.5, 128])
        np.testing.assert_array_equal(canvas.pixels[3, 0], [255, 0, 8, 128])
        np.testing.assert_array_equal(canvas.get_pixel(-2, -2), [255, 0, 8, 128])
        canvas.put_pixel(1, 1, [1, 1, 1])
        np.testing.assert_array_equal(canvas.pixels[0, 3], [1, 1, 1, 255])

    def test_out_of_bounds_ignored(self):
        canvas = Canvas(4, 4)
        for x, y in ((2, 0), (0, 2), (-3, 0), (0, -3)):
            canvas.put_pixel(x, y, [255, 255, 255])
        self.assertEqual(canvas.pixels.sum(), 0)

    def test_blit_and_clear(self):
        canvas = Canvas(3, 2)
        frame = np.full((2, 3, 4), 7, np.uint8)
        canvas.blit(frame)
        np.testing.assert_array_equal(canvas.pixels, frame)
        with self.assertRaises(ValueError):
            canvas.blit(np.zeros((3, 2, 4), np.uint8))
        canvas.clear([1, 2, 3])
        np.testing.assert_array_equal(canvas.pixels[1, 2], [1, 2, 3, 255])

    def test_write_to_file(self):
        canvas = Canvas(3, 2)
        canvas.put_pixel(0, 0, [255, 0, 0])
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out.png")
            canvas.writeToFile(path)
            with PIM.open(path) as im:
                self.assertEqual(im.size, (3, 2))
                self.assertEqual(im.mode, "RGBA")
                np.testing.assert_array_equal(np.array(im), canvas.pixels)


class TestFrameDriver(unittest.TestCase):

    def setUp(self):
        self.scene = default_scene()

    def test_render_delivers_frame(self):
        driver = FrameDriver(Canvas(6, 4))
        self.assertTrue(driver.render(self.scene, depth=2))
        np.testing.assert_array_equal(driver.canvas.pixels, render_image(self.scene, 6, 4, depth=2))
        self.assertEqual(driver.frames_delivered, 1)

    def test_superseded_render_is_discarded(self):
        driver = FrameDriver(Canvas(6, 4))

        def change_settings(row):
            if row == 0:
                driver.request()

        self.assertFalse(driver.render(self.scene, on_row=change_settings))
        self.assertEqual(driver.canvas.pixels.sum(), 0)
        self.assertEqual(driver.frames_delivered, 0)
        # a later render goes through
        self.assertTrue(driver.render(self.scene))
        self.assertEqual(driver.frames_delivered, 1)

    def test_explicit_generation(self):
        driver = FrameDriver(Canvas(2, 2))
        old = driver.request()
        new = driver.request()
        self.assertGreater(new, old)
        self.assertFalse(driver.render(self.scene, generation=old))
        self.assertTrue(driver.render(self.scene, generation=new))

    def test_request_from_another_thread(self):
        driver = FrameDriver(Canvas(6, 4))
        started = threading.Event()
        resume = threading.Event()
        results = []

        def wait_for_new_request(row):
            if row == 0:
                started.set()
                resume.wait(5)

        worker = threading.Thread(
            target=lambda: results.append(driver.render(self.scene, on_row=wait_for_new_request)))
        worker.start()
        self.assertTrue(started.wait(5))
        newer = driver.request()
        resume.set()
        worker.join(5)

        self.assertFalse(worker.is_alive())
        self.assertEqual(results, [False])
        self.assertEqual(driver.canvas.pixels.sum(), 0)
        self.assertEqual(driver.frames_delivered, 0)
        self.assertTrue(driver.render(self.scene, generation=newer))

    def test_verbose_progress(self):
        driver = FrameDriver(Canvas(2, 3), verbose=True)
        out = StringIO()
        with redirect_stdout(out):
            driver.render(self.scene)
        self.assertIn("rendering row 3/3...", out.getvalue())


class TestCli(unittest.TestCase):

    def test_render_builtin_scene(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "render.png")
            with redirect_stdout(StringIO()):
                status = cli.main(["default", "-o", path, "--width", "8", "--height", "6", "--depth", "9"])
            self.assertEqual(status, 0)
            with PIM.open(path) as im:
                self.assertEqual(im.size, (8, 6))

    def test_render_scene_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            scene_path = os.path.join(tmp, "scene.json")
            with open(scene_path, "w") as f:
                json.dump(SCENE_DATA, f)
            path = os.path.join(tmp, "render.png")
            with redirect_stdout(StringIO()):
                cli.main([scene_path, "-o", path, "--width", "4", "--height", "4"])
            self.assertTrue(os.path.exists(path))

    def test_bad_scene_exits(self):
        with redirect_stdout(StringIO()):
            with self.assertRaises(SystemExit):
                cli.main(["/nonexistent/scene.json"])

    def test_mistyped_scene_file_exits(self):
        with tempfile.TemporaryDirectory() as tmp:
            scene_path = os.path.join(tmp, "scene.json")
            with open(scene_path, "w") as f:
                json.dump(with_changes(["spheres", 0, "radius"], "1"), f)
            with redirect_stderr(StringIO()) as err:
                with self.assertRaises(SystemExit) as cm:
                    cli.main([scene_path, "-o", os.path.join(tmp, "render.png")])
            self.assertEqual(cm.exception.code, 2)
            self.assertIn("Sphere radius must be a number", err.getvalue())
            self.assertFalse(os.path.exists(os.path.join(tmp, "render.png")))


if __name__ == '__main__':
    unittest.main()
