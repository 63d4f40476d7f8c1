"""Agent token launchpad: launch admission, reward allocation and fee claiming."""

__version__ = "1.0.0"
