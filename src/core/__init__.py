"""Core domain package for logpoints.

Core contains the expiration policy, field codec, and targeting logic
without any storage-specific code, keeping the business logic portable.
"""
