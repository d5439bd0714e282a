"""Domain Layer: models, errors, events and ports for the Backlog context."""
