"""Exception hierarchy for the podcast pipeline."""


class PodcastError(Exception):
    """Base class for podcast pipeline failures."""


class ScriptGenerationError(PodcastError):
    """The generation service failed or returned nothing usable."""


class ScriptParseError(ScriptGenerationError):
    """The generated text contained no recognizable dialogue lines."""


class AudioSynthesisError(PodcastError):
    """The speech synthesis service rejected a request."""


class ContentFetchError(PodcastError):
    """A reference URL could not be retrieved."""
