"""Gemini-backed recipe analysis for uploaded cooking videos."""
