"""
Tutor Admin - administrative actions for an LLM-driven admin assistant.

The agent discovers what it may do through a fixed tool catalog and calls
it through a single dispatch entry point; every call is validated before it
touches the user / subscription / system-settings store.
"""
