"""
Command implementations behind the command-line interface.
"""
