"""Async contracts: keyed instances with coalesced execution."""
