from __future__ import annotations


class IndexerError(Exception):
    """Base class for every error raised while indexing block data."""


class DecodingError(IndexerError):
    """Event data does not match the ABI shape expected for its kind."""


class MalformedTopicError(DecodingError):
    pass


class MalformedPayloadError(DecodingError):
    pass


class EnrichmentError(IndexerError):
    """An auxiliary contract read needed to complete a record failed."""


class RemoteCallError(EnrichmentError):
    """The node could not be reached or did not answer."""


class ContractExecutionError(EnrichmentError):
    """The simulated call ran but did not succeed."""


class SchemaError(IndexerError):
    """Tables or views of a protocol could not be created."""


class DuplicateKeyError(IndexerError):
    """
    An insert hit a uniqueness constraint.

    Usually means the block was already indexed.
    """

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"duplicate key on {table}: {message}")
        self.table = table
