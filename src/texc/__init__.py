from .constants import TEXC_VERSION as __version__

__all__ = ["__version__"]
