"""treenvim — navigable directory-tree view for Neovim."""

__version__ = "0.1.0"


class TreeNvimError(Exception):
    """Base class for user-facing tree view errors.

    The action dispatcher reports any subclass as an editor notification
    instead of letting it escape into the event loop.
    """


class ConfigError(TreeNvimError):
    """Invalid ``g:tree_nvim`` settings or keymap action names."""


class ListingProviderFailure(TreeNvimError):
    """The listing provider exited non-zero or produced no output.

    The previous snapshot stays installed when this is raised.
    """


class MalformedEntry(TreeNvimError):
    """A listing line or JSON node could not be parsed.

    Aborts the listing in progress; no partial snapshot is installed.
    """


class IconProviderUnavailable(TreeNvimError):
    """Icons were requested but no icon provider is loadable."""


class FilesystemMutationFailure(TreeNvimError):
    """A create, delete or rename of a path failed."""


class InvalidTransition(TreeNvimError):
    """A navigation action that is not valid in the current state.

    Reported as a notice; state is left unchanged.
    """
