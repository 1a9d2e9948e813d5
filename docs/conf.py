"""Sphinx configuration for ISS Trail Tracker."""

import os
import sys

# Add parent directory to path so Sphinx can import modules
sys.path.insert(0, os.path.abspath(".."))

# Project information
project = "ISS Trail Tracker"
copyright = "2026, ISS Trail Tracker contributors"
author = "ISS Trail Tracker contributors"
version = "1.0"
release = "1.0.0"

# Sphinx extensions
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
]

autodoc_default_options = {
    "members": True,
    "undoc-members": True,
    "member-order": "bysource",
}

# Napoleon settings for Google-style docstrings
napoleon_google_docstring = True
napoleon_numpy_docstring = False

# HTML theme
html_theme = "sphinx_rtd_theme"

source_suffix = ".rst"
master_doc = "index"

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

pygments_style = "sphinx"
