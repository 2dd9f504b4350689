# ABOUTME: Subcommands for the bookmeta CLI.
# ABOUTME: One module per command: search, resolve, and isbn.
