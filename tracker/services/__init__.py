"""
Service layer for Outcome Tracker.

Services wrap the row store for outcomes, outputs and action logs. Import
them from their modules (tracker.services.outcomes, tracker.services.action_logs).
"""
