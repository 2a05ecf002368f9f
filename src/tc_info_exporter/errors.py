"""Exception types raised inside the exporter."""


class ExporterError(Exception):
    """Base class for exporter errors."""


class CredentialError(ExporterError):
    """Cloud credentials are missing or malformed. Fatal at startup."""


class ScrapeTimeout(ExporterError):
    """The overall scrape deadline passed before a collector finished."""
