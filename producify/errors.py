"""
Errors raised by the build pipeline.

Every failure aborts the whole build; the command line reports the first
one and exits with status 1.
"""


class BuildError(Exception):
    """Base class for all pipeline failures"""


class FolderNotFound(BuildError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Folder not found: {path}")


class OptionError(BuildError):
    """Invalid or missing command line / build option"""


MissingOption = OptionError


class OverwriteDeclined(BuildError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Refusing to overwrite {path}")


class IncludeNotFound(BuildError):
    def __init__(self, path, referenced_by):
        self.path = path
        self.referenced_by = referenced_by
        super().__init__(
            f"Included file not found: {path}\nFile was included by {referenced_by}"
        )


class IncludeCycleDetected(BuildError):
    def __init__(self, path, chain):
        self.path = path
        self.chain = list(chain)
        trail = " -> ".join(str(p) for p in [*self.chain, path])
        super().__init__(f"Include cycle detected: {trail}")


class AssetNotFound(BuildError):
    def __init__(self, kind, path, referenced_by):
        self.kind = kind
        self.path = path
        self.referenced_by = referenced_by
        super().__init__(
            f"{kind.label} file not found: {path}\nFile was referenced by {referenced_by}"
        )


class IOFailure(BuildError):
    def __init__(self, op, path, cause=None):
        self.op = op
        self.path = path
        self.cause = cause
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"Could not {op} {path}{detail}")
