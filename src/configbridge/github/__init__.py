"""GitHub REST access."""

from configbridge.github.client import FileFound, FileLookup, FileNotFound, GitHubClient

__all__ = ["FileFound", "FileLookup", "FileNotFound", "GitHubClient"]
