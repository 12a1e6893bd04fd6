"""
errors.py - Caller-facing error type.

Transient data conditions (catalog failures, malformed items) never raise;
only contract violations by the caller do.
"""


class FeedInputError(ValueError):
    # Invalid caller input: bad page number, unknown duration bucket, bad knob value.
    pass
