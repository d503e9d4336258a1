"""
Docker Reaper - reclaims disk space by removing stale containers and unused Docker images.
"""

__version__ = "1.0.0"
__author__ = "Docker Reaper"
__description__ = "Lock-guarded Docker container and image cleanup tool"
