"""FastAPI backend for Outcome Tracker."""
