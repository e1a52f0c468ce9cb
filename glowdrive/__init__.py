"""Task planning, dot plotting, resource matching, shard location tracking,
file distribution, executor bookkeeping and option parsing for data flows."""

__version__ = "0.1.0"