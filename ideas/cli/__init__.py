"""
The Ideas command-line interface. Run ``ideas --help`` for the available commands.
"""
