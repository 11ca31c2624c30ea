"""Application services: safety gate, analysis, fusion, tracking, notifications."""
