"""Domain layer - storage rules with no infrastructure dependencies."""
