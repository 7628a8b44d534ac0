"""
Error taxonomy for the voice-to-inventory pipeline.

Transport-level failures propagate and end the run. ExtractionParseError is
raised only inside the extractor, which absorbs it and degrades to an empty
extraction. "No match" is not an error: it is a VerifiedMaterial with
available=False.
"""


class VoiceMatchError(Exception):
    """Base class for pipeline failures."""
    stage = "pipeline"


class TranscriptionError(VoiceMatchError):
    """ASR was unreachable or rejected the audio."""
    stage = "transcription"


class ExtractionParseError(VoiceMatchError):
    """The language model returned output that does not fit the schema."""
    stage = "extraction"


class ExtractionTransportError(VoiceMatchError):
    """Network or auth failure calling the language model."""
    stage = "extraction"


class CatalogFetchError(VoiceMatchError):
    """Network, auth or shape failure fetching the live catalog."""
    stage = "verification"
