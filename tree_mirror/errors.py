class MirrorError(Exception):
    """Base error for the project. Every subclass aborts the current run."""

class ConfigError(MirrorError):
    pass

class OutputRootError(MirrorError):
    pass

class ScanError(MirrorError):
    pass

class ErrorLogError(MirrorError):
    pass

class StateError(MirrorError):
    pass
