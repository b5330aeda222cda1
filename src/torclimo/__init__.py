r"""Package for analyzing tornado outbreak energy and its severe weather environment."""

from ._version import get_version  # noqa: E402
__version__ = get_version()
del get_version
