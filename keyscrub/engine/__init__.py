# keyscrub/engine/__init__.py

"""Engine package providing key naming, extraction, merging, and substitution.

The three operations exposed here are pure functions of their inputs and are
what the orchestrator schedules across its worker pool.
"""

from keyscrub.engine.merger import merge
from keyscrub.engine.namer import KeyNamer
from keyscrub.engine.sanitizer import sanitize
from keyscrub.engine.scout import scout

__all__ = ["KeyNamer", "merge", "sanitize", "scout"]
