"""
Core utilities: exceptions, logging context, security and HTTP plumbing.
"""
