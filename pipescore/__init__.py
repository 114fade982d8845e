"""pipescore — CI/CD maturity audits and leaderboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pipescore")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
