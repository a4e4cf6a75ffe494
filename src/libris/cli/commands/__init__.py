# ABOUTME: Subcommands of the libris CLI, one module per command or command group.
