"""Host build-graph abstraction and its in-memory implementation."""

from .host import BuildGraph
from .memory import InMemoryBuildGraph
from .model import Command, CustomCommand, Target

__all__ = ["BuildGraph", "Command", "CustomCommand", "InMemoryBuildGraph", "Target"]
