from .keys import KeySource, StaticKeySource, TextFileKeySource
from .orchestrator import BuildOrchestrator, BuildRun

__all__ = [
    "BuildOrchestrator",
    "BuildRun",
    "KeySource",
    "StaticKeySource",
    "TextFileKeySource",
]
