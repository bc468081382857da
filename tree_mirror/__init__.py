"""Tree Mirror: one-way directory mirroring with a trash area.

Copies new and changed files from an input tree into an output tree and
moves output files that no longer have a source into a timestamped
``trash`` folder instead of deleting them.
"""

__version__ = "1.0.0"
__app_name__ = "Tree Mirror"
