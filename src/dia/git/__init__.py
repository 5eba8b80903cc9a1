"""Git-backed repository discovery for dia."""

from dia.git.listing import filter_listing, find_git_root, list_project_dirs

__all__ = ["filter_listing", "find_git_root", "list_project_dirs"]
