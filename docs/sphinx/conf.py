# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the treemapper documentation."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from treemapper import __version__  # noqa: E402

project = "treemapper"
author = "TreeMapper Contributors"
release = __version__

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

autodoc_member_order = "bysource"
napoleon_google_docstring = True
napoleon_numpy_docstring = False

html_theme = "alabaster"
