"""Planner API routes."""
