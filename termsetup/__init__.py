"""termsetup — terminal environment provisioning (zsh, Oh My Zsh, plugins, Starship)."""

__version__ = "0.1.0"
