"""
Exceptions raised by the schedule pipeline.

Routes map these to HTTP status codes; everything else becomes a 500.
Malformed schedule data never raises: fields degrade to empty values.
"""


class ScheduleError(Exception):
    """Base class for pipeline errors."""
    status_code = 500


class ConfigurationError(ScheduleError):
    """A preset, profile or presets file that a request references is missing or invalid."""
    status_code = 404


class RenderError(ScheduleError):
    """Unrecoverable layout input, such as a zero or negative page size."""
    status_code = 500


class ExternalFetchError(ScheduleError):
    """A remote asset (logo image) could not be fetched after retrying."""
    status_code = 502


class UploadError(ScheduleError):
    """Writing an artifact to blob storage failed."""
    status_code = 500

    def __init__(self, key, cause):
        self.key = key
        self.cause = cause
        super().__init__(f"Upload of {key} failed: {cause}")
