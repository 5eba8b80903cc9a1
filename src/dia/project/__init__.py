"""Project tree model and whole-tree passes."""

from dia.project.exports import merge_exports
from dia.project.tree import Project, build_project_tree, enable_tree

__all__ = ["Project", "build_project_tree", "enable_tree", "merge_exports"]
