"""Exceptions raised by the lensing renderer."""


class LensingError(Exception):
    pass


class RenderError(LensingError):
    """A render could not produce an image."""


class RenderSetupError(RenderError):
    """Fatal problem before any pixel work started (thread pool, image buffer)."""


class TextureError(LensingError):
    """A texture could not be read or its image has an unusable shape."""


class ConfigError(LensingError, ValueError):
    pass
