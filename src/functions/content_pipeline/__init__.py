"""
Content Pipeline Module

Drives morning-routine content blocks through shaping, narration script
generation and speech synthesis. Each stage runs as an independent batch job
that claims records with a conditional update, so overlapping invocations
never process the same record twice. Housekeeping jobs recover stuck records,
expire stale ones and report pipeline health.
"""

__version__ = "1.0.0"
