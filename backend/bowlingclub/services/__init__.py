"""Domain services: auth, games/scores, clubs and the dashboard.

Routes and socket handlers import from here; services raise the errors in
``bowlingclub.errors`` and never build HTTP responses.
"""
