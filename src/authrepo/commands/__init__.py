"""Built-in CLI commands: ``serve``, ``resolve`` and the ``profile`` group."""
