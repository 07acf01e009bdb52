"""Custom exceptions for shapegen.

This module defines a hierarchy of exceptions used throughout shapegen to
provide clear, actionable error messages for the different failure scenarios
of loading a service model and generating client code from it.
"""


class ShapegenError(Exception):
    """Base exception for all shapegen errors.

    All exceptions raised by shapegen inherit from this class, making it easy
    to catch all shapegen-related errors with a single except clause.

    Example:
        try:
            codegen.generate()
        except ShapegenError as e:
            print(f"shapegen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ModelError(ShapegenError):
    """Base exception for service model errors."""

    pass


class ModelLoadError(ModelError):
    """Failed to load a service model from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load service model from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class ModelValidationError(ModelError):
    """The service model is malformed or breaks a cross-reference invariant.

    Attributes:
        source: The source path or URL of the invalid model.
        errors: List of validation error messages.
    """

    def __init__(self, source: str, errors: list[str] | None = None):
        self.source = source
        self.errors = errors or []
        message = f"Service model validation failed for '{source}'"
        if errors:
            message += f': {"; ".join(errors)}'
        super().__init__(message)


class ModelReferenceError(ModelError):
    """A shape reference could not be resolved.

    Attributes:
        shape_name: The shape name that was looked up.
        referrer: Where the reference came from, if known.
    """

    def __init__(self, shape_name: str, referrer: str | None = None):
        self.shape_name = shape_name
        self.referrer = referrer
        message = f"Unknown shape '{shape_name}'"
        if referrer:
            message += f' (referenced by {referrer})'
        super().__init__(message)


class CodeGenerationError(ShapegenError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class UnsupportedShapeError(CodeGenerationError):
    """The generator has no rule for a shape kind.

    The shape model is fixed at generation time, so this is an unconditional
    abort rather than something to recover from.

    Attributes:
        shape_name: The name of the offending shape.
        shape_type: The shape kind that has no generation rule.
    """

    def __init__(self, shape_name: str, shape_type: str, rule: str | None = None):
        self.shape_name = shape_name
        self.shape_type = shape_type
        message = f"No generation rule for shape type '{shape_type}'"
        if rule:
            message += f' in {rule}'
        super().__init__(message, context=shape_name)


class OperationGenerationError(CodeGenerationError):
    """Error generating the client method of an operation.

    Attributes:
        operation_name: The name of the operation.
        method: The HTTP method of the operation.
        request_uri: The request URI template of the operation.
    """

    def __init__(
        self,
        operation_name: str,
        method: str | None = None,
        request_uri: str | None = None,
        cause: Exception | None = None,
    ):
        self.operation_name = operation_name
        self.method = method
        self.request_uri = request_uri
        message = f"Failed to generate operation '{operation_name}'"
        if method and request_uri:
            message += f' ({method.upper()} {request_uri})'
        super().__init__(message, context=operation_name, cause=cause)


class ConfigurationError(ShapegenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(ShapegenError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class UnsupportedFeatureError(ShapegenError):
    """Attempted to use an unsupported feature.

    Attributes:
        feature: Description of the unsupported feature.
        suggestion: Optional suggestion for a workaround.
    """

    def __init__(self, feature: str, suggestion: str | None = None):
        self.feature = feature
        self.suggestion = suggestion
        message = f'Unsupported feature: {feature}'
        if suggestion:
            message += f'. {suggestion}'
        super().__init__(message)
