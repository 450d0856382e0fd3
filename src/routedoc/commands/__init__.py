"""Built-in CLI sub-commands for routedoc.

* :mod:`~routedoc.commands.dump` -- ``dump`` (Markdown, JSON or HTML) and
  ``swagger-dump`` (Swagger 1.2).

Each command is a plain callback function registered directly on the root
app in :mod:`routedoc.app`.
"""
