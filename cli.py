"""Render a sphere scene to a PNG file.

    python cli.py                       # built-in default scene
    python cli.py scene.json -o out.png --depth 5 --show
"""
import argparse
import os

from canvas import Canvas
from driver import FrameDriver
from ray import DEFAULT_DEPTH, EPSILON, MAX_DEPTH
from scenes import SCENES, load_scene
from utils import SceneError


def render(scene, output_path='render.png', width=600, height=600, depth=DEFAULT_DEPTH,
           epsilon=EPSILON, show=False, verbose=False):
    """Render `scene` and write it to `output_path`; returns the Canvas."""
    driver = FrameDriver(Canvas(width, height), verbose=verbose)
    driver.render(scene, depth=depth, epsilon=epsilon)
    if output_path:
        driver.canvas.writeToFile(output_path)
        print(f"saved {output_path}")
    if show:
        driver.canvas.show(title=os.path.basename(output_path or 'render'))
    return driver.canvas


def build_parser():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('scene', nargs='?', default='default',
                        help="JSON scene file, or one of: {}".format(', '.join(sorted(SCENES))))
    parser.add_argument('-o', '--output', default='render.png')
    parser.add_argument('--width', type=int, default=600)
    parser.add_argument('--height', type=int, default=600)
    parser.add_argument('--depth', type=int, default=DEFAULT_DEPTH,
                        help="reflection depth, 0-{}".format(MAX_DEPTH))
    parser.add_argument('--epsilon', type=float, default=EPSILON, help="shadow bias")
    parser.add_argument('--show', action='store_true', help="display the result with matplotlib")
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error("image size must be positive")

    if args.scene in SCENES:
        scene = SCENES[args.scene]()
    else:
        try:
            scene = load_scene(args.scene)
        except (OSError, SceneError) as e:
            parser.error(str(e))

    render(scene, args.output, args.width, args.height, args.depth, args.epsilon,
           show=args.show, verbose=args.verbose)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
