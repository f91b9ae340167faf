from PIL import Image as PIM
import numpy as np

import matplotlib.pyplot as plt

from utils import to_uint8


class Canvas(object):
    """Canvas

    An RGBA uint8 pixel buffer addressed with centered coordinates: (0, 0) is
    the middle of the image, x grows to the right and y grows upwards.
    """

    def __init__(self, width, height, pixels=None):
        if not (width > 0 and height > 0):
            raise ValueError("Canvas size must be positive, got {}x{}".format(width, height))
        self.width = int(width)
        self.height = int(height)
        if pixels is None:
            pixels = np.zeros([self.height, self.width, 4], dtype=np.uint8)
        self.pixels = pixels

    @property
    def pixels(self):
        return self._samples

    @pixels.setter
    def pixels(self, data):
        data = np.asarray(data)
        if data.shape != (self.height, self.width, 4):
            raise ValueError("Expected {}x{} RGBA pixels, got shape {}".format(self.width, self.height, data.shape))
        self._samples = data.astype(np.uint8, copy=True)

    def _offset(self, x, y):
        return self.height - self.height // 2 - 1 - y, self.width // 2 + x

    def put_pixel(self, x, y, color):
        """Write one pixel; coordinates outside the canvas are ignored."""
        row, col = self._offset(x, y)
        if row < 0 or col < 0 or row >= self.height or col >= self.width:
            return
        self._samples[row, col] = to_uint8(color)

    def get_pixel(self, x, y):
        row, col = self._offset(x, y)
        return self._samples[row, col].copy()

    def blit(self, frame):
        """Replace the whole canvas with a rendered (height, width, 4) frame."""
        self.pixels = frame

    def clear(self, color=(0, 0, 0)):
        self._samples[:, :] = to_uint8(color)

    def PIL(self):
        return PIM.fromarray(self._samples)

    def writeToFile(self, output_path, **kwargs):
        self.PIL().save(output_path, **kwargs)

    def show(self, title=None, new_figure=True, axis=None, **kwargs):
        if (new_figure and axis is None):
            if (title is not None):
                plt.figure(num=title)
            else:
                plt.figure()
        if (axis is not None):
            axis.imshow(self._samples, **kwargs)
            axis.axis('off')
        else:
            plt.imshow(self._samples, **kwargs)
            plt.axis('off')
            if (title):
                plt.title(title)
            plt.show()
