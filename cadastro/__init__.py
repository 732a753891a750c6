"""
Cadastro de clientes identificados por CPF.

The package is split the same way across layers:
- domain: CPF validation, the client record model and error kinds
- repositories: persistence adapters (JSON file or SQL database)
- services: use cases that validate and orchestrate repositories
- routers/app/console: outer surfaces that only call the services
"""
