"""Text output of ranked photos."""

from flickrate.renderer.table import contract, render_table


__all__ = ["contract", "render_table"]
