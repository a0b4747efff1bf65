"""Service layer - record stores and the collaborators around the pricing engine."""
