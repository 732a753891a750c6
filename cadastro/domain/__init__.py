"""Domain rules: CPF validation, client record model and error kinds."""
