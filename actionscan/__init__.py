"""Building blocks for statically analysing GitHub Actions workflows and actions."""

__version__ = "1.7.0"

__all__ = [
    "coordinate",
    "keys",
    "matrix",
    "models",
    "registry",
    "tpa_list",
    "utils",
    "uses",
]