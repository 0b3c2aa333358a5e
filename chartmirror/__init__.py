"""
chartmirror — Mirror upstream Helm charts into a GitHub Pages Helm repository.
"""

__version__ = "0.3.0"
