"""Dependency graph construction and rendering."""

from .render import render
from .resolver import Deadline, DependencyResolver

__all__ = ["Deadline", "DependencyResolver", "render"]
