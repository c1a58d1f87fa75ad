"""Background execution and result delivery for BuildID."""

from .identity import UNKNOWN_SIGNATURE, BuildIdentity
from .task import SignatureCallback, SignatureTask, TaskOutcome

__all__ = [
    "UNKNOWN_SIGNATURE",
    "BuildIdentity",
    "SignatureCallback",
    "SignatureTask",
    "TaskOutcome",
]
