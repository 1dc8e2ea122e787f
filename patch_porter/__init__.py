"""
Patch Porter - Copy a range of commits between local git repositories.

This package exports commits from a source repository/branch as patch files
and re-applies them, in order, onto a branch of a destination repository.
"""

__version__ = "1.0.0"
