"""Contracts package.

This package defines the *public* surface shared by stores, contracts and their
consumers: event names, recognized options, and the errors raised on misuse.
"""
