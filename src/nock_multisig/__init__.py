"""nock-multisig — M-of-N multisig transaction model for Nockchain notes."""

__version__ = "0.1.0"
