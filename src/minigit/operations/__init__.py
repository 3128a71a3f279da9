"""Repository operations composed from storage and engine primitives."""
