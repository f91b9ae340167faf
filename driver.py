import itertools
import threading

import numpy as np

from canvas import Canvas
from ray import render_rows, DEFAULT_DEPTH, EPSILON


class FrameDriver(object):
    """Renders scenes into a Canvas, one whole frame at a time.

    Every call to `request` (and every `render`) starts a new generation. A
    render checks between rows whether it is still the newest one and gives up
    as soon as a newer request arrives, so only the latest render reaches the
    canvas.
    """

    def __init__(self, canvas=None, width=600, height=600, verbose=False):
        self.canvas = canvas if canvas is not None else Canvas(width, height)
        self.verbose = verbose
        self._generations = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()
        self.frames_delivered = 0

    def request(self):
        """Supersede any render in flight; returns the new generation number."""
        with self._lock:
            self._latest = next(self._generations)
            return self._latest

    def is_current(self, generation):
        return generation == self._latest

    def render(self, scene, depth=DEFAULT_DEPTH, epsilon=EPSILON, generation=None, on_row=None):
        """Render `scene` and deliver it to the canvas unless superseded.

        Parameters:
          scene : Scene -- the scene to render
          depth : int -- reflection depth
          epsilon : float -- shadow bias
          generation : int -- generation obtained from `request`, or None for a fresh one
          on_row : callable(int) -- called after each finished row
        Return:
          bool -- True if the frame was delivered
        """
        if generation is None:
            generation = self.request()
        width, height = self.canvas.width, self.canvas.height
        frame = np.zeros((height, width, 4), np.uint8)

        for i, row in render_rows(scene, width, height, depth, epsilon, self.verbose):
            frame[i] = row
            if on_row is not None:
                on_row(i)
            if not self.is_current(generation):
                if self.verbose:
                    print(f"render {generation} superseded at row {i+1}/{height}")
                return False

        with self._lock:
            if not self.is_current(generation):
                return False
            self.canvas.blit(frame)
            self.frames_delivered += 1
        return True
