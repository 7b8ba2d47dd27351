"""
Admin commands.

Each module defines a :class:`~rulesbot.command.command_registry.CommandHandler`
subclass. Handlers are registered explicitly in ``rulesbot.runtime.build_registry``;
registration order is the order of the aggregated usage text.
"""
