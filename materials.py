import numpy as np
from utils import SceneError, color, number

# Specular exponent that turns highlights off
NO_SPECULAR = -1


class Material:

    def __init__(self, base_color, specular=NO_SPECULAR, reflective=0.):
        """
        Create a new material with the given parameters.

        Parameters:
          base_color : (3,) or (4,) -- base color, channels in 0-255; only RGB is shaded
          specular : float -- specular exponent (shininess), or NO_SPECULAR
          reflective : float -- mirror reflection fraction in [0, 1]
        """
        base = color(base_color)
        specular = number(specular, "Specular exponent")
        reflective = number(reflective, "Reflectivity")
        if specular != NO_SPECULAR and not specular > 0:
            raise SceneError("Specular exponent must be positive or {}, got {}".format(NO_SPECULAR, specular))
        if not 0.0 <= reflective <= 1.0:
            raise SceneError("Reflectivity must be in [0, 1], got {}".format(reflective))

        self.color = base[:3]
        self.specular = specular
        self.reflective = reflective

    def __repr__(self):
        return "Material(color={}, specular={}, reflective={})".format(
            np.array2string(self.color), self.specular, self.reflective)
