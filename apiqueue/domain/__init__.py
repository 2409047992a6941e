"""Domain Layer: value objects, errors, events and ports shared by the core."""
