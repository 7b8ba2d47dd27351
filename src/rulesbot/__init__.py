"""
RulesBot - Discord bot that keeps server rules in front of members

RulesBot periodically posts a rule drawn from a curated outline document into
busy channels, and gives administrators a small command surface to edit that
document and the bot configuration at runtime.

Core Components:

- **Rule Document**: Parses the indented outline text, renders it back with
  layout heuristics, and picks random self-contained sections to post
- **Config Store**: Nested YAML-backed settings addressed by dotted paths, with
  per-path validation, typed parsing of command input and change listeners
- **Command Registry**: Routes ``/admin`` sub-commands (config, rules, logs,
  post) to their handlers and aggregates usage text
- **Rule Posts**: Background scheduler that posts a rule once a channel has seen
  enough messages since the bot last spoke there
- **Interactive Console**: Live administration of the running bot from stdin

Usage:
    from rulesbot.main import main
    main()  # Starts the bot with console interface
"""
