"""Synchronous store with memoized getters."""
