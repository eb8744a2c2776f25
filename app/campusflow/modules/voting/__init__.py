"""
Voting module: organizer-created polls, one vote per user per poll.
"""
