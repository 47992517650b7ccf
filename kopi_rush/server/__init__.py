# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""Game session engine for KopiRush."""

from .kopi_environment import KopiEnvironment, SessionState
from .timer import CountdownTimer

__all__ = ["KopiEnvironment", "SessionState", "CountdownTimer"]
