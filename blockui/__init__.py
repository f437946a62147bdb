"""Off-thread immediate-mode UI: input bridge, canvas, glyph atlas, draw batching and FFD warping."""

__version__ = "0.1.0"