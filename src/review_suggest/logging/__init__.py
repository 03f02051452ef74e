"""Operator diagnostics: which path served each request, and what it cost."""
