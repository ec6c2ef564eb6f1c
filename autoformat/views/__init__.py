"""View rendering: the shared template engine and the JSON/HTML response emitter."""
