"""Subcommands of the pcbi command-line tool."""
