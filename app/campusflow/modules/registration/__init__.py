"""
Registration module.

State machine per (event, user): registered / waitlisted / cancelled / attended.
Capacity and waitlist behavior come from the event's module config.
"""
