__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'optsmith'
__author__ = 'optsmith contributors'
__license__ = 'MIT'
# kept in step with pyproject.toml
__version__ = "0.1.0"

from .arguments import *
from .coercion import *
from .comments import *
from .faults import *
from .registry import *
from .renderer import Format, Renderer
from .splicer import Splicer, splice

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# kept in step with pyproject.toml
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "Format",
    "Renderer",
    "Splicer",
    "splice",
)

# Load the exposed API of the markers
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the coercion library
__all__ += coercion.__all__  # type: ignore[attr-defined]
# Load the exposed API of the comment providers
__all__ += comments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry
__all__ += registry.__all__  # type: ignore[attr-defined]
