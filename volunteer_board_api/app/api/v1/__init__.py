"""
Version 1 of the API.

Bundles the user, report and notification endpoints of the Volunteer
Board API.
"""
