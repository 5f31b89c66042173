from themeweave.tree.builder import MAX_VARIABLE_DEPTH, VariableResolver, build, merge_variables
from themeweave.tree.tree import INHERIT, IndexedRule, ThemeTree

__all__ = [
    "INHERIT",
    "IndexedRule",
    "MAX_VARIABLE_DEPTH",
    "ThemeTree",
    "VariableResolver",
    "build",
    "merge_variables",
]
