"""Building blocks for actors: mailboxes, futures, reference-counted handles and a work-sharing scheduler."""

__version__ = "0.1.0"
__all__ = ["core", "mailbox", "future", "scheduler", "refs"]