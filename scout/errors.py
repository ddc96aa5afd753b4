"""
Exception hierarchy for Item Scout.

Usage:
    from scout.errors import DraftingError, UpstreamCallError

    try:
        draft = await drafter.draft(identification, market, comparables)
    except DraftingError as e:
        logger.error(f"Drafting failed: {e}")
"""
from typing import Optional


class ScoutError(Exception):
    """
    Base exception for all Item Scout errors.

    Carries the pipeline stage (when known) and the upstream cause so a
    single human-readable message can be surfaced to the user.
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class MissingCredentialError(ScoutError):
    """A credential needed by a collaborator is absent. Selects a fallback path."""


class UpstreamCallError(ScoutError):
    """A collaborator call failed at the network or protocol level."""


class MalformedResponseError(ScoutError):
    """A collaborator returned data that cannot be parsed into the expected shape."""


class IdentificationError(MalformedResponseError):
    """The vision response could not be split into description and category."""


class DraftingError(MalformedResponseError):
    """The drafting backend returned an unusable listing draft."""


class StorageError(ScoutError):
    """The key/value storage medium failed."""


class PipelineError(ScoutError):
    """A pipeline stage failed; the run produced no draft."""

    def __init__(self, stage: str, cause: BaseException):
        label = stage.replace("_", " ").capitalize()
        super().__init__(f"{label} failed: {cause}", stage=stage, cause=cause)

    def __str__(self) -> str:
        return self.message
