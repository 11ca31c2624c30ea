"""
SERENE - Stress & Crisis Analysis Pipeline

Backend services that score stress in short chat messages, gate
crisis language before it is sent, track per-user trends and turn
qualifying results into deduplicated wellness notifications.

IMPORTANT: This is a safety-critical wellbeing system.
The synchronous crisis gate must never be bypassed.
"""

__version__ = "0.1.0"
__author__ = "SERENE Engineering Team"
