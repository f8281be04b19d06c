"""relcut: cut alpha/beta/official releases from a release branch."""

__version__ = "0.4.0"
