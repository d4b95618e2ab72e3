"""Shared runtime pieces: configuration, context, channels, backoff, errors and workers."""