from utils import *
from ray import *
from cli import render

red   = Material(vec([255, 0, 0]),   specular=500, reflective=0.2)
blue  = Material(vec([0, 0, 255]),   specular=500, reflective=0.3)
green = Material(vec([0, 255, 0]),   specular=10,  reflective=0.4)
floor = Material(vec([255, 255, 0]), specular=1000, reflective=0.5)

scene = Scene([
    Sphere(vec([0, -1, 3]), 1, red),
    Sphere(vec([2, 0, 4]), 1, blue),
    Sphere(vec([-2, 0, 4]), 1, green),
    Sphere(vec([0, -5001, 0]), 5000, floor),
], [
    AmbientLight(0.2),
    PointLight(vec([2, 1, 0]), 0.6),
    DirectionalLight(vec([1, 4, 4]), 0.2),
], bg_color=vec([0, 0, 0]), camera=Camera(vec([0, 0, -1])))

render(scene, "three_spheres.png", 400, 400, depth=MAX_DEPTH, verbose=True)
