"""
CLI Commands — click commands registered on the main group.
"""
