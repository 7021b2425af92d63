"""Exam session engine and shared runtime helpers."""
