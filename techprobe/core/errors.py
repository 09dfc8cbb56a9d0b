class TechProbeError(Exception):
    """Base class for TechProbe errors."""


class RegistryError(TechProbeError):
    """The static signature catalog is corrupt. Raised at load time, never per request."""


class PatternCompileError(TechProbeError):
    """A user or AI supplied pattern failed to compile.

    Carried inside ``CompiledPattern.error`` rather than raised.
    """

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason
