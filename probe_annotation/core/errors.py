class ProbeAnnotationError(Exception):
    """Base class for errors raised by probe_annotation."""


class MetadataError(ProbeAnnotationError):
    """Image metadata needed for a prediction is missing."""


class RiskEstimationError(ProbeAnnotationError):
    """The prediction service could not produce a usable result."""
