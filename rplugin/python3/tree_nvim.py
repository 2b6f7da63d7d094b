"""Remote plugin entry point; Neovim's python3 host loads classes from here."""

from treenvim.plugin import TreePlugin

__all__ = ["TreePlugin"]
