"""Error taxonomy for stage construction.

Every error in this module is raised while a read or write stage is being
*built*, never while data moves. Errors raised by the format or receiver
backends during execution propagate unchanged and are not wrapped here.

Retry guidance:
    MissingConfigurationError   caller error, never retry
    ConfigMappingError          caller error, never retry
    ConfigurationMismatchError  caller error, never retry
    UnsupportedOperationError   permanent capability gap, never retry
"""


class CdapIOError(Exception):
    """Base class for all adapter construction errors."""


class MissingConfigurationError(CdapIOError, ValueError):
    """Raised when a required request field is absent at build time.

    Attributes:
        field: Name of the missing field (e.g. "key_type", "locks_dir_path")
    """

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required")


class ConfigMappingError(CdapIOError):
    """Raised when a parameter cannot be mapped onto a plugin config field.

    Covers three cases, all naming the offending field:
    - the parameter value cannot be coerced to the field's declared type
    - a required field has no corresponding parameter
    - a parameter names a field the config class does not declare

    Attributes:
        field: Offending field name ("<root>" when the parameters are not a mapping)
        reason: Human-readable coercion failure
        config_class: Name of the target config class
    """

    def __init__(self, field: str, reason: str, *, config_class: str | None = None) -> None:
        self.field = field
        self.reason = reason
        self.config_class = config_class
        target = f" for {config_class}" if config_class else ""
        super().__init__(f"Invalid parameter '{field}'{target}: {reason}")


class ConfigurationMismatchError(CdapIOError):
    """Raised when declared classes disagree with what the plugin actually provides.

    Examples: the requested key type is not the format's key type, a batch
    source descriptor is handed to the write path, or the plugin registered a
    format provider of an unexpected class.
    """


class LockDirectoryConflictError(ConfigurationMismatchError):
    """Raised when the locks directory overlaps the write stage's output directory.

    Lock files written into the data output directory would be committed as
    output, so the two paths must be disjoint.
    """

    def __init__(self, locks_dir: str, output_dir: str) -> None:
        self.locks_dir = locks_dir
        self.output_dir = output_dir
        super().__init__(f"Locks directory {locks_dir!r} must not overlap the output directory {output_dir!r}")


class UnsupportedOperationError(CdapIOError, NotImplementedError):
    """Raised for permanent capability gaps (e.g. writing through a streaming plugin).

    This is not a transient failure. Callers must not retry.
    """
